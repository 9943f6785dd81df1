"""Sources of changed files and pull requests, and review submission."""
