"""
单元测试：保留存储

测试覆盖：
- 写入时按保留时长淘汰
- 范围查询（最新在前、提前终止、边界）
- 未知目标、覆盖创建
"""

import pytest

from conftest import BASE_TIME, FakeClock, make_record
from uptime_monitor.exceptions import DurationExceedsRetention, UnknownTarget
from uptime_monitor.store import RetentionStore


@pytest.fixture
def store(clock):
    return RetentionStore(clock=clock)


class TestAppend:
    """写入与淘汰"""

    def test_eviction_by_retention_horizon(self, store):
        """测试：保留 120s，依次写入 t, t+30, t+130, t+260"""
        store.create_target("site", 120)

        sizes = []
        for offset in (0, 30, 130, 260):
            store.append("site", make_record(offset))
            sizes.append(store.size("site"))

        assert sizes == [1, 2, 2, 1]

    def test_append_unknown_target(self, store):
        """测试：目标未创建时写入失败"""
        with pytest.raises(UnknownTarget) as exc_info:
            store.append("missing", make_record(0))
        assert exc_info.value.target_id == "missing"

    def test_record_at_exact_horizon_is_kept(self, store):
        """测试：恰好等于保留时长的记录不淘汰"""
        store.create_target("site", 60)
        store.append("site", make_record(0))
        store.append("site", make_record(60))
        assert store.size("site") == 2

    def test_out_of_order_record_is_kept(self, store):
        """测试：乱序记录照常追加（不重新排序）"""
        store.create_target("site", 60)
        store.append("site", make_record(100))
        store.append("site", make_record(10))
        assert store.size("site") == 2

    def test_default_horizon(self, store):
        store.create_target("site")
        assert store.retention_horizon("site") == 3600


class TestCreateTarget:
    """条目创建"""

    def test_has_target(self, store):
        assert store.has_target("site") is False
        store.create_target("site")
        assert store.has_target("site") is True

    def test_recreate_drops_records(self, store):
        """测试：重复创建会覆盖已有数据"""
        store.create_target("site", 600)
        store.append("site", make_record(0))
        store.append("site", make_record(1))

        store.create_target("site", 120)

        assert store.size("site") == 0
        assert store.retention_horizon("site") == 120


class TestRangeQuery:
    """范围查询"""

    def test_returns_newest_first(self, store, clock):
        """测试：窗口内的所有记录按最新在前返回"""
        store.create_target("site", 600)
        records = [make_record(offset) for offset in (0, 10, 20)]
        for r in records:
            store.append("site", r)
        clock.advance(20)

        result = store.range_query("site", 60)

        assert result == list(reversed(records))

    def test_stops_at_first_old_record(self, store, clock):
        """测试：只返回 duration 秒内的记录（以当前时间为准）"""
        store.create_target("site", 600)
        for offset in (0, 100, 200, 250):
            store.append("site", make_record(offset))
        clock.advance(260)

        result = store.range_query("site", 100)

        assert [r.timestamp for r in result] == [
            make_record(250).timestamp,
            make_record(200).timestamp,
        ]

    def test_zero_duration_returns_empty(self, store, clock):
        """测试：duration=0 且只有过去的记录时返回空"""
        store.create_target("site", 600)
        store.append("site", make_record(0))
        clock.advance(1)

        assert store.range_query("site", 0) == []

    def test_duration_equal_to_horizon_is_allowed(self, store, clock):
        store.create_target("site", 600)
        store.append("site", make_record(0))

        assert len(store.range_query("site", 600)) == 1

    def test_duration_exceeds_horizon(self, store):
        """测试：duration 大于保留时长时报错"""
        store.create_target("site", 600)

        with pytest.raises(DurationExceedsRetention) as exc_info:
            store.range_query("site", 601)

        assert exc_info.value.duration == 601
        assert exc_info.value.horizon == 600

    def test_query_unknown_target(self, store):
        with pytest.raises(UnknownTarget):
            store.range_query("missing", 10)

    def test_empty_entry(self, store):
        store.create_target("site")
        assert store.range_query("site", 60) == []

    def test_uses_wall_clock_not_newest_record(self):
        """测试：记录年龄以当前时间计算，而不是最新记录"""
        clock = FakeClock(BASE_TIME)
        store = RetentionStore(clock=clock)
        store.create_target("site", 3600)
        store.append("site", make_record(0))
        store.append("site", make_record(5))
        clock.advance(1000)

        assert store.range_query("site", 600) == []
