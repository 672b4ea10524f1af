"""Command-line interface for webviewbridge."""
