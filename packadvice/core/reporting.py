# -*- coding: utf-8 -*-
from __future__ import annotations

import html
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from packadvice.config import APP_NAME, APP_VERSION
from packadvice.core.adviser import PackResult
from packadvice.models import ERROR, NOTICE, WARNING, PackAdviserStatus


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _esc(s: Any) -> str:
    return html.escape("" if s is None else str(s))


def _group_statuses(statuses: List[PackAdviserStatus]) -> Dict[str, List[PackAdviserStatus]]:
    groups: Dict[str, List[PackAdviserStatus]] = {ERROR: [], WARNING: [], NOTICE: []}
    for s in statuses:
        lvl = (s.severity or NOTICE).upper()
        groups.setdefault(lvl, []).append(s)
    return groups


def build_report_html(
    result: PackResult,
    profile: str = "",
    statuses: Optional[List[PackAdviserStatus]] = None,
) -> str:
    statuses = list(result.statuses if statuses is None else statuses)
    groups = _group_statuses(statuses)
    meta = result.pack.pack_meta

    css = """
    body { font-family: -apple-system, Segoe UI, Roboto, Arial, sans-serif; margin: 24px; }
    h1 { margin: 0 0 6px 0; }
    .sub { color: #444; margin: 0 0 18px 0; }
    .card { border: 1px solid #ddd; border-radius: 10px; padding: 14px; margin: 12px 0; }
    .row { display: flex; gap: 18px; flex-wrap: wrap; }
    .kv { min-width: 220px; }
    .k { color: #666; font-size: 12px; }
    .v { font-weight: 600; }
    table { width: 100%; border-collapse: collapse; margin-top: 8px; }
    th, td { border-bottom: 1px solid #eee; padding: 8px; text-align: left; vertical-align: top; font-size: 13px; }
    th { background: #fafafa; position: sticky; top: 0; }
    .pill { display: inline-block; padding: 2px 8px; border-radius: 999px; font-size: 12px; font-weight: 700; }
    .err { background: #ffe9e9; color: #8a0000; }
    .warn { background: #fff4d6; color: #7a5200; }
    .info { background: #e9f3ff; color: #003a7a; }
    code { background: #f6f6f6; padding: 1px 4px; border-radius: 6px; }
    .small { font-size: 12px; color: #555; }
    """

    def pill(level: str) -> str:
        lvl = level.upper()
        if lvl == ERROR:
            return '<span class="pill err">ERROR</span>'
        if lvl == WARNING:
            return '<span class="pill warn">WARNING</span>'
        return '<span class="pill info">NOTICE</span>'

    def render_statuses(level: str, items: List[PackAdviserStatus]) -> str:
        if not items:
            return f"<p class='small'>No {level.lower()}s.</p>"
        rows = []
        for s in items:
            rows.append(
                f"<tr>"
                f"<td>{pill(s.severity)}</td>"
                f"<td><code>{_esc(s.code)}</code></td>"
                f"<td><code>{_esc(s.path)}</code></td>"
                f"<td>{_esc(s.message)}</td>"
                f"</tr>"
            )
        return (
            "<table>"
            "<thead><tr><th>Severity</th><th>Code</th><th>Path</th><th>Message</th></tr></thead>"
            "<tbody>"
            + "".join(rows) +
            "</tbody></table>"
        )

    counts = result.counts()
    count_items = "".join(
        f"<li><code>{_esc(name)}</code> - {value}</li>" for name, value in counts.items()
    )

    html_out = f"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>{_esc(APP_NAME)} Report - {_esc(result.pack.root)}</title>
  <style>{css}</style>
</head>
<body>
  <h1>{_esc(APP_NAME)} - Pack Report</h1>
  <p class="sub">Generated {_esc(_utc_now())} (UTC) - Tool version {_esc(APP_VERSION)}</p>

  <div class="card">
    <div class="row">
      <div class="kv"><div class="k">Profile</div><div class="v">{_esc(profile)}</div></div>
      <div class="kv"><div class="k">pack_format</div><div class="v">{_esc(meta.pack_format)}</div></div>
      <div class="kv"><div class="k">Minecraft</div><div class="v">{_esc(meta.minecraft_version())}</div></div>
      <div class="kv"><div class="k">Description</div><div class="v">{_esc(meta.description)}</div></div>
    </div>
    <div class="row" style="margin-top:10px;">
      <div class="kv" style="min-width:420px;"><div class="k">Pack Root</div><div class="v"><code>{_esc(result.pack.root)}</code></div></div>
    </div>
  </div>

  <div class="card">
    <h2>Findings Summary</h2>
    <ul>{count_items}</ul>
    <p class="small">
      {len(groups.get(ERROR, []))} error(s),
      {len(groups.get(WARNING, []))} warning(s),
      {len(groups.get(NOTICE, []))} notice(s)
    </p>

    <h3>Errors</h3>
    {render_statuses(ERROR, groups.get(ERROR, []))}

    <h3>Warnings</h3>
    {render_statuses(WARNING, groups.get(WARNING, []))}

    <h3>Notices</h3>
    {render_statuses(NOTICE, groups.get(NOTICE, []))}
  </div>

</body>
</html>
"""
    return html_out


def write_report_html(html_text: str, report_path: str) -> str:
    p = Path(report_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(html_text, encoding="utf-8")
    return str(p)
