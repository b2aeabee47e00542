"""Application modules.

This package contains the feature modules of the video upload service:
- auth: JWT bearer authentication
- video: Video records and the upload endpoints
- transcoding: Staging, fast-start remuxing, aspect ratio probing, object upload
"""
