"""Keep note filenames, first headings and frontmatter titles in sync."""
