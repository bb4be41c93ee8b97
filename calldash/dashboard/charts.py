import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

GRID_COLOR = "#374151"
AXIS_COLOR = "#9ca3af"
LINE_COLOR = "#8b5cf6"

def _dark_layout(fig):
    fig.update_layout(
        margin=dict(l=10, r=10, t=10, b=10),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=AXIS_COLOR),
        hoverlabel=dict(bgcolor="#1f2937", bordercolor="#4f46e5"),
    )
    fig.update_xaxes(gridcolor=GRID_COLOR, griddash="dash")
    fig.update_yaxes(gridcolor=GRID_COLOR, griddash="dash")
    return fig

def plot_call_duration(df: pd.DataFrame):
    fig = px.line(df, x="name", y="count", markers=True, custom_data=["percentage"])
    fig.update_traces(
        line=dict(color=LINE_COLOR, width=3, shape="spline"),
        marker=dict(color=LINE_COLOR, size=8),
        hovertemplate="%{x}<br>count: %{y}<br>%{customdata[0]:.1f}%<extra></extra>",
    )
    fig.update_layout(xaxis_title=None, yaxis_title=None)
    return _dark_layout(fig)

def plot_sad_path(df: pd.DataFrame):
    fig = go.Figure(go.Bar(
        x=df["value"],
        y=df["issue"],
        orientation="h",
        marker_color=list(df["fill"]),
    ))
    fig.update_yaxes(autorange="reversed", tickfont=dict(size=10))
    return _dark_layout(fig)

def plot_hostility_donut(df: pd.DataFrame):
    color_map = dict(zip(df["label"], df["color"]))
    fig = px.pie(df, names="label", values="value", hole=0.6,
                 color="label", color_discrete_map=color_map)
    fig.update_traces(textinfo="percent", textfont_color="white", hoverinfo="label+value")
    fig.update_layout(showlegend=True, legend=dict(orientation="h", y=-0.1, x=0.5, xanchor="center"))
    return _dark_layout(fig)
