"""craftbrew - declarative package-state reconciliation for Homebrew.

Keeps the installed formulae, casks, taps and App Store apps of one machine
in sync with a set of Brewfile-style manifests.
"""

__version__ = "1.0.0"
