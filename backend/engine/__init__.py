from .ai_analysis import AIAnalyzer
from .findings import VULNERABILITY_CATALOG, Vulnerability, synthesize_findings
from .report_renderer import render_report
from .scan_lifecycle import ScanLifecycleManager

__all__ = [
    "AIAnalyzer",
    "ScanLifecycleManager",
    "VULNERABILITY_CATALOG",
    "Vulnerability",
    "render_report",
    "synthesize_findings",
]
