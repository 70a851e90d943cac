"""Command-line front end for projreview."""
