import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from calldash.dashboard.charts import plot_call_duration, plot_hostility_donut, plot_sad_path
from calldash.dashboard.shell import DashboardShell
from calldash.persistence.memory_gateway import InMemoryGateway

def test_chart_figures():
    shell = DashboardShell(InMemoryGateway())

    line = plot_call_duration(shell.duration_view())
    assert list(line.data[0].x) == ["0-60s", "60-120s", "120-180s", "180s+"]
    assert list(line.data[0].y) == [4000, 3000, 2000, 1000]

    bars = plot_sad_path(shell.sad_path_view())
    assert bars.data[0].orientation == "h"
    assert len(bars.data[0].y) == 5

    donut = plot_hostility_donut(shell.hostility_view())
    assert list(donut.data[0].labels) == ["Low", "Medium", "High"]
    assert donut.data[0].hole == 0.6
