"""Version information for GroupWeaver."""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)

# Version history:
# 1.0.0 - Initial Release
#   - Relationship graph from imports, directory siblings and text similarity.
#   - Import, directory, semantic and mixed grouping strategies.
#   - Token budget optimizer that splits and merges groups for a context window.
#   - Project loader and Click CLI for grouping a checkout from the shell.
