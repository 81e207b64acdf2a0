"""bach - parser and name analysis for the bach language."""
