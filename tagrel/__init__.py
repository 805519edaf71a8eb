"""tag-release: human-in-the-loop release tagging.

Validates a version string, picks the release strategy (GA, pre-release or
patch), prepares the release branch, tags, pushes, and hands off to the
packaging tool.
"""

__version__ = "0.3.0"
