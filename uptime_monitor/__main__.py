"""
使用方式:
    python -m uptime_monitor
    或
    UPTIME_MONITOR_CONFIG=/path/to/config.yaml uptime-monitor
"""

from uptime_monitor.main import cli

if __name__ == "__main__":
    cli()
