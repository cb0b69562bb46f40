"""Version information for frontdesk-router package."""

__version__ = "0.3.0"
__version_info__ = tuple(map(int, __version__.split(".")))

# Package metadata
__title__ = "frontdesk-router"
__description__ = "Skill routing and escalation engine for AI front-desk agents"
__author__ = "Front Desk Router Team"
__author_email__ = "support@frontdesk-router.io"
__license__ = "MIT"
__copyright__ = "Copyright 2024 Front Desk Router Team"

# URLs
__url__ = "https://github.com/frontdesk-router/frontdesk-router"
__tracker__ = "https://github.com/frontdesk-router/frontdesk-router/issues"

# Development status
__status__ = "Beta"

# Supported Python versions
__python_requires__ = ">=3.9"
