from shooting_report.report.renderer import RenderResult, ReportRenderer

__all__ = ["ReportRenderer", "RenderResult"]
