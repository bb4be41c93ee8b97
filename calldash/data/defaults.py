from calldash.data.models import ChartDatum, HostilityDatum, SadPathDatum

CHART_TITLE = "Call Duration Analysis"
SAD_PATH_TITLE = "Sad Path Analysis (Top Issues)"
HOSTILITY_TITLE = "Customer Hostility Level"

DEFAULT_CALL_DURATION = [
    ChartDatum(name="0-60s", count=4000),
    ChartDatum(name="60-120s", count=3000),
    ChartDatum(name="120-180s", count=2000),
    ChartDatum(name="180s+", count=1000),
]

SAD_PATH_DATA = [
    SadPathDatum(issue="Caller Identification Failed", value=320, fill="#ef4444"),
    SadPathDatum(issue="Agent Misunderstood Request", value=270, fill="#f97316"),
    SadPathDatum(issue="Unsupported Language", value=180, fill="#facc15"),
    SadPathDatum(issue="Transfer to Human Failed", value=140, fill="#8b5cf6"),
    SadPathDatum(issue="Call Dropped", value=90, fill="#3b82f6"),
]

HOSTILITY_DATA = [
    HostilityDatum(label="Low", value=65, color="#22c55e"),
    HostilityDatum(label="Medium", value=25, color="#facc15"),
    HostilityDatum(label="High", value=10, color="#ef4444"),
]
