"""
Silver Stage

This stage turns the raw bronze chart rows (untyped text) into the typed,
cleaned silver table used for analysis.

Key responsibilities:
- Read every row from bronze.spotify_top_podcasts
- Resolve one canonical show id per (show_title, publisher)
- Clean, decode and type every field
- Replace silver.spotify_top_podcasts in one transaction
"""
