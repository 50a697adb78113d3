"""
app/services package marker.
"""

from app.services.analysis_session import AnalysisSession
from app.services.csv_sniffer import ColumnProfile, CSVSniffer, SniffResult, get_csv_sniffer, sniff

__all__ = [
    "AnalysisSession",
    "ColumnProfile",
    "CSVSniffer",
    "SniffResult",
    "get_csv_sniffer",
    "sniff",
]
