"""Plotly HTML report for a fetched series and its indicators."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd
import plotly.express as px

from quotefetch.domain.models import InstrumentSeries
from quotefetch.indicators import IndicatorKind, IndicatorSpec, indicator_frame


def generate_series_report(
    series: InstrumentSeries,
    specs: Sequence[IndicatorSpec],
    output_html_path: str,
) -> Path:
    """Render closes with overlays, plus RSI on its own chart."""
    output = Path(output_html_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    title = f"{series.symbol} {series.interval.value}/{series.period.value} ({series.currency})"
    if not series.bars:
        empty_df = pd.DataFrame({"timestamp": [], "close": []})
        figure = px.line(empty_df, x="timestamp", y="close", title=title)
        figure.write_html(str(output), include_plotlyjs="cdn")
        return output

    frame = indicator_frame(series, specs).reset_index()
    overlay_columns = ["close"] + [
        spec.column for spec in specs if spec.kind is not IndicatorKind.RSI
    ]
    oscillator_columns = [spec.column for spec in specs if spec.kind is IndicatorKind.RSI]

    prices = px.line(frame, x="timestamp", y=overlay_columns, title=title)
    html_parts = [
        "<html><head><meta charset='utf-8'>",
        f"<title>quotefetch report {series.symbol}</title></head><body>",
        prices.to_html(full_html=False, include_plotlyjs="cdn"),
    ]
    if oscillator_columns:
        oscillator = px.line(
            frame,
            x="timestamp",
            y=oscillator_columns,
            title=f"{series.symbol} RSI",
            range_y=[0, 100],
        )
        html_parts.append(oscillator.to_html(full_html=False, include_plotlyjs=False))
    html_parts.append("</body></html>")
    output.write_text("".join(html_parts), encoding="utf-8")
    return output
