"""FLAC music library: metadata reading, SQLite database, browse models, album art and scanning."""