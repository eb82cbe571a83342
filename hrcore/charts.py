from __future__ import annotations

from typing import Any, Dict, List, Union

import altair as alt

alt.data_transformers.disable_max_rows()

PALETTE: List[str] = ["#8884d8", "#82ca9d", "#ffc658", "#ff8042", "#0088FE", "#00C49F"]
AXIS_LABEL_COLOR = "#64748b"

AnyChart = Union[alt.Chart, alt.LayerChart]


def to_vega_spec(chart: AnyChart) -> Dict[str, Any]:
    """Vega-Lite dict for ``chart`` with the console's shared view settings."""
    styled = chart.configure_view(strokeWidth=0).configure_axis(labelColor=AXIS_LABEL_COLOR)
    return styled.to_dict()


def palette_scale() -> alt.Scale:
    return alt.Scale(range=PALETTE)
