"""
eifscope Output Module
=======================

Console display and JSON report generation for image parse results.
"""

from eifscope.output.console import EifConsoleOutput
from eifscope.output.report import EifReportGenerator

__all__ = [
    "EifConsoleOutput",
    "EifReportGenerator",
]
