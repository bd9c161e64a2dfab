"""
TeXPreview - fast approximate rendering of multi-file LaTeX projects

Turns a restricted LaTeX subset into an HTML document tree without running a
real typesetting engine, giving near-instant visual feedback while editing.

Architecture:
- Assembly Context: File snapshots, include resolution and source cleanup
- Rendering Context: Staged transformation to HTML plus the diagnostic log
"""

__version__ = "0.1.0"
