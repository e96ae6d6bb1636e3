"""
Video Link Resolver API Package.

Package Structure:
    - v1/: Version 1 API endpoints
        - video.py: resolve, proxy and download endpoints

All endpoints are versioned under the /api/v1 URL prefix.
"""
