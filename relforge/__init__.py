"""relforge: release-branch bookkeeping for CI.

One run bumps the version code in a tracked file, rewrites the semantic
version line of the tag file, pushes the trunk, forks a dated release branch
with an empty divergence marker commit, and turns pending tag-file entries
into pushed tags.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
