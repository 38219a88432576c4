import datetime
from html import escape
from typing import Optional, Sequence

from ..models import Finding, ScanResult

STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
           line-height: 1.6; max-width: 1200px; margin: 0 auto; padding: 20px; background: #f5f5f5; }
    .header { background: white; padding: 20px; border-radius: 8px; margin-bottom: 20px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 15px; margin-bottom: 20px; }
    .summary-card { background: white; padding: 15px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .summary-card h3 { margin: 0 0 10px 0; font-size: 14px; color: #666; text-transform: uppercase; }
    .summary-card .count { font-size: 32px; font-weight: bold; }
    .violations { color: #d32f2f; }
    .passes { color: #388e3c; }
    .incomplete { color: #f57c00; }
    .inapplicable { color: #757575; }
    .violation { background: white; padding: 20px; margin-bottom: 15px; border-radius: 8px; border-left: 4px solid #9e9e9e;
                 box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .violation.critical { border-left-color: #d32f2f; }
    .violation.serious { border-left-color: #f57c00; }
    .violation.moderate { border-left-color: #ffa726; }
    .violation.minor { border-left-color: #ffeb3b; }
    .violation h3 { margin-top: 0; color: #333; }
    code { background: #f5f5f5; padding: 2px 6px; border-radius: 3px; font-size: 14px; display: inline-block;
           max-width: 100%; overflow-wrap: break-word; }
    details { margin-top: 10px; }
    summary { cursor: pointer; color: #1976d2; font-weight: 500; }
    summary:hover { text-decoration: underline; }
    ul { margin: 10px 0; }
    .no-violations { background: #e8f5e9; color: #2e7d32; padding: 20px; border-radius: 8px; text-align: center;
                     font-size: 18px; font-weight: 500; }
"""

SUCCESS_BANNER = '<div class="no-violations">&#9989; No accessibility violations found!</div>'


def render_violation(v: Finding) -> str:
    impact = v.impact.value if v.impact else "incomplete"
    nodes = ""
    for node in v.nodes:
        checks = ""
        if node.check_messages:
            checks = "<ul>" + "".join(f"<li>{escape(m)}</li>" for m in node.check_messages) + "</ul>"
        nodes += f"""
            <li>
              <code>{escape(node.html)}</code>
              {checks}
            </li>"""

    return f"""
    <div class="violation {impact}">
      <h3>{escape(v.id)}: {escape(v.help)}</h3>
      <p><strong>Impact:</strong> {impact}</p>
      <p><strong>Description:</strong> {escape(v.description)}</p>
      <p><strong>Help:</strong> <a href="{escape(v.help_url)}" target="_blank">{escape(v.help_url)}</a></p>
      <p><strong>Nodes affected:</strong> {len(v.nodes)}</p>
      <details>
        <summary>Show affected elements</summary>
        <ul>{nodes}
        </ul>
      </details>
    </div>"""


def render_report(scan: ScanResult, violations: Sequence[Finding], page_name: str, url: str,
                  test_label: str, generated: Optional[datetime.datetime] = None) -> str:
    """
    Self-contained HTML report. ``violations`` replaces ``scan.violations``
    so folded-in incomplete checks are listed too.
    """
    generated = generated or datetime.datetime.now()
    timestamp = generated.strftime("%Y-%m-%d %H:%M:%S")

    if violations:
        body = f"<h2>Violations Found ({len(violations)})</h2>" + "".join(render_violation(v) for v in violations)
    else:
        body = SUCCESS_BANNER

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Accessibility Report - {escape(page_name)}</title>
  <style>{STYLE}</style>
</head>
<body>
  <div class="header">
    <h1>Accessibility Report</h1>
    <p><strong>Test:</strong> {escape(test_label)}</p>
    <p><strong>Page:</strong> {escape(page_name)}</p>
    <p><strong>URL:</strong> <a href="{escape(url)}" target="_blank">{escape(url)}</a></p>
    <p><strong>Generated:</strong> {timestamp}</p>
  </div>

  <div class="summary">
    <div class="summary-card"><h3>Violations</h3><div class="count violations">{len(violations)}</div></div>
    <div class="summary-card"><h3>Passes</h3><div class="count passes">{len(scan.passes)}</div></div>
    <div class="summary-card"><h3>Incomplete</h3><div class="count incomplete">{len(scan.incomplete)}</div></div>
    <div class="summary-card"><h3>Inapplicable</h3><div class="count inapplicable">{len(scan.inapplicable)}</div></div>
  </div>

  {body}
</body>
</html>
"""
