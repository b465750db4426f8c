"""kubedesk - a kubectl front-end with a visible command transcript."""

__version__ = "0.1.0"
