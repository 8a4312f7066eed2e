"""
Bronze Stage

Loads the daily Top Podcasts CSV export, untouched, into the raw staging
table bronze.spotify_top_podcasts. Every load is a full snapshot.
"""
