"""Run report and email notification."""

from pvelxc.notify.report import ReportBuilder
from pvelxc.notify.mailer import Mailer

__all__ = [
    "ReportBuilder",
    "Mailer",
]
