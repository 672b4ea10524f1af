"""webviewbridge - drive embedded webviews of a desktop host from automation clients."""

__version__ = "0.3.0"
__logo__ = "🪟"
