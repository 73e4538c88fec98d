"""
Uptime Monitor - 站点可用性监控服务

负责：
- 按固定间隔探测目标站点（HTTP）
- 将探测结果分类为成功/失败记录
- 维护 2 分钟滑动窗口可用性并在跨越阈值时告警
- 在内存中按目标保留最近一小时记录
- 按多种周期输出汇总统计
"""

__version__ = "1.0.0"
