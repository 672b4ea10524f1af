"""Client-facing API: dispatcher, socket listener and webview attach server."""
