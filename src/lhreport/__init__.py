"""lhreport: render Lighthouse-style audit results as HTML reports."""

__version__ = "0.1.0"
