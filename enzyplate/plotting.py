"""
Diagnostic plots of single-well debug traces.
"""

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from .assays import CATALYTIC_RATE, GENERATION_RATE, FIBRINOLYSIS

# Panels per assay: (title, y-axis label, [(trace key, legend name, color), ...])
_PANELS = {
    CATALYTIC_RATE: [
        ('Signal', 'Absorbance', [('sample', 'Sample', 'gray'), ('paired', 'Replicate', 'silver'),
                                  ('mean', 'Mean', 'royalblue')]),
        ('Rate of Change', 'ΔAbs / time point', [('diff', 'Difference', 'gray'),
                                                  ('smoothed', 'Smoothed', 'red')]),
    ],
    GENERATION_RATE: [
        ('Signal', 'Absorbance', [('sample', 'Sample', 'gray'), ('paired', 'Replicate', 'silver'),
                                  ('mean', 'Mean', 'royalblue'),
                                  ('background_mean', 'Background', 'black')]),
        ('Lysis Rate', 'LR', [('lr', 'LR', 'gray'), ('smoothed_lr', 'Smoothed LR', 'royalblue'),
                              ('bg_lr', 'Background LR', 'black')]),
        ('Net Lysis Rate', 'net-LR', [('net_lr', 'net-LR', 'green')]),
    ],
    FIBRINOLYSIS: [
        ('Normalized Signal', 'Lysis (%)', [('norm', 'Sample', 'royalblue'),
                                            ('norm_bg', 'Background', 'black'),
                                            ('net', 'Net', 'green')]),
        ('Lysis Rate', '% / time point', [('diff', 'Difference', 'gray'),
                                          ('smoothed', 'Smoothed', 'red')]),
    ],
}


def plot_debug_trace(trace, plot_title=None):
    """
    Build a figure of the intermediate arrays in a debug trace.

    Parameters
    ----------
    trace : dict
        Trace from `analysis.debug_trace` or one of the `assays` calculators

    plot_title : str, optional (default=None)
        Custom title for the figure. Auto-generates if None.

    Returns
    -------
    plotly.graph_objects.Figure
    """
    assay = trace['assay']
    panels = _PANELS[assay]

    fig = make_subplots(
        rows=len(panels), cols=1,
        subplot_titles=[p[0] for p in panels],
        vertical_spacing=0.10
    )

    for row, (_, y_label, series) in enumerate(panels, start=1):
        for key, name, color in series:
            values = trace.get(key)
            if values is None or len(values) == 0:
                continue
            fig.add_trace(
                go.Scatter(
                    x=np.arange(len(values)),
                    y=values,
                    mode='lines+markers',
                    name=name,
                    line=dict(color=color, width=2),
                    marker=dict(size=4)
                ),
                row=row, col=1
            )
        fig.update_xaxes(title_text="Time point", row=row, col=1)
        fig.update_yaxes(title_text=y_label, row=row, col=1)

    _add_markers(fig, trace, len(panels))

    if plot_title is None:
        well = trace.get('well_id', 'well')
        plot_title = f"{well} {assay.replace('_', ' ')}: result = {trace['result']:.6g}"
        if trace.get('short_circuit'):
            plot_title += f" ({trace['short_circuit']})"

    fig.update_layout(
        height=350 * len(panels),
        title_text=plot_title,
        template='plotly_white',
        showlegend=True
    )

    return fig


def _add_markers(fig, trace, n_panels):
    """Mark peaks, regression fits and thresholds"""
    assay = trace['assay']

    if assay == CATALYTIC_RATE and len(trace['smoothed']) > 0:
        fig.add_hline(y=trace['max_value'], line_dash="dash", line_color="red",
                      annotation_text="Max rate", row=2, col=1)

    elif assay == GENERATION_RATE and len(trace['regression_x']) > 0:
        x_fit = trace['regression_x']
        y_fit = trace['regression_slope'] * x_fit + trace['regression_intercept']
        fig.add_trace(
            go.Scatter(
                x=x_fit,
                y=y_fit,
                mode='lines',
                name='PGR fit',
                line=dict(color='red', width=3, dash='dash')
            ),
            row=n_panels, col=1
        )

    elif assay == FIBRINOLYSIS:
        fig.add_hline(y=50, line_dash="dot", line_color="gray",
                      annotation_text="50%", row=1, col=1)
        if trace['hlt_index'] >= 0:
            fig.add_vline(x=trace['hlt_index'], line_dash="dash", line_color="red",
                          annotation_text="HLT", row=1, col=1)
        if trace['tmlr'] > 0:
            fig.add_vline(x=trace['tmlr'] - 1, line_dash="dash", line_color="red",
                          annotation_text="TMLR", row=2, col=1)
