"""Host collaborators: vault, frontmatter cache and notifier.

``base`` holds the protocols the engine depends on; ``local`` adapts a plain
directory of Markdown files to them.
"""
