"""Clipvault Backend Application.

Accepts mp4 uploads, remuxes them for fast-start playback, classifies their
aspect ratio and stores them in object storage.

Modules:
    - core: Configuration, database, logging, storage, errors
    - modules.auth: JWT bearer authentication
    - modules.video: Video records and upload endpoints
    - modules.transcoding: Media processing pipeline stages
"""

__version__ = "0.1.0"
