"""
Video Link Resolver Backend Application Package

Resolves share links from short-video platforms (Douyin, Kuaishou,
Xiaohongshu, TikTok) to canonical, directly playable media:

- Share-text URL extraction and host-based platform detection
- Douyin share-page scraping and item API lookup
- Fallback chain of third-party parsing APIs
- Media proxy with anti-hotlink headers and Range support

Package Structure:
- api/: REST API endpoints organized by version (v1)
- core/: Outbound HTTP client construction
- models/: Pydantic data models
- services/: Resolution orchestrator and strategies
- utils/: Link parsing, field-path, watermark and logging helpers
"""

__version__ = "1.0.0"
__app_name__ = "video-link-resolver"
