"""
单元测试：结果分类

测试覆盖：
- 状态码模式匹配（"x" 通配，完整匹配）
- 成功/失败记录的字段
- 错误列表命中时转为失败
- 写入存储与推送订阅者（顺序、容错）
"""

import pytest

from uptime_monitor.classifier import ERROR_CODE_MESSAGE, OutcomeClassifier, match_code
from uptime_monitor.models import ProbeTiming
from uptime_monitor.store import RetentionStore


@pytest.fixture
def store(clock):
    s = RetentionStore(clock=clock)
    s.create_target("site")
    return s


@pytest.fixture
def classifier(store, clock):
    return OutcomeClassifier("site", store, clock=clock)


class TestMatchCode:
    """状态码模式匹配"""

    def test_wildcard_single_digit(self):
        assert match_code("40x", 401) is True

    def test_full_string_match(self):
        """测试：不能只匹配前缀"""
        assert match_code("40x", 4010) is False

    def test_case_insensitive_wildcard(self):
        assert match_code("3xX", 345) is True

    def test_literal_pattern(self):
        assert match_code("500", 500) is True
        assert match_code("500", 345) is False

    def test_default_error_list(self, classifier):
        assert classifier.is_error_code(404) is True
        assert classifier.is_error_code(503) is True
        assert classifier.is_error_code(200) is False
        assert classifier.is_error_code(302) is False


class TestClassify:
    """记录生成"""

    def test_success_record(self, classifier, clock):
        """测试：200 + 50ms -> 成功记录"""
        record = classifier.classify_success(200, ProbeTiming(total_time=50))

        assert record.success is True
        assert record.code == 200
        assert record.detail.latency_ms == 50
        assert record.latency_ms == 50
        assert record.timestamp == clock.now

    def test_error_status_redirected_to_failure(self, classifier):
        """测试：默认错误列表下 404 视为失败"""
        record = classifier.classify_success(404, ProbeTiming(total_time=12))

        assert record.success is False
        assert record.code == 404
        assert record.detail.message == ERROR_CODE_MESSAGE
        assert record.latency_ms is None

    def test_failure_record(self, classifier):
        record = classifier.classify_failure(TimeoutError("Connection timed out"), 28)

        assert record.success is False
        assert record.code == 28
        assert record.detail.message == "Connection timed out"

    def test_custom_error_list(self, store, clock):
        """测试：自定义错误列表（2xx 视为失败，4xx 视为成功）"""
        classifier = OutcomeClassifier("site", store, error_list=["2xX"], clock=clock)

        assert classifier.classify_success(204, ProbeTiming(total_time=1)).success is False
        assert classifier.classify_success(404, ProbeTiming(total_time=1)).success is True

    def test_record_is_immutable(self, classifier):
        record = classifier.classify_success(200, ProbeTiming(total_time=5))
        with pytest.raises(Exception):
            record.success = False

    def test_prober_callbacks(self, classifier, store):
        """测试：探测器回调签名"""
        classifier.on_success(200, b"", {}, ProbeTiming(total_time=10))
        classifier.on_failure(ConnectionError("refused"), None)

        assert store.size("site") == 2


class TestExport:
    """写入存储与推送"""

    def test_store_then_listeners(self, classifier, store):
        """测试：先写存储，再推送订阅者"""
        calls = []
        classifier.subscribe(lambda r: calls.append(("listener", store.size("site"))))

        classifier.classify_success(200, ProbeTiming(total_time=5))

        assert calls == [("listener", 1)]

    def test_store_failure_does_not_block_push(self, clock):
        """测试：存储写入失败仍推送给订阅者"""
        store = RetentionStore(clock=clock)  # 未创建目标
        classifier = OutcomeClassifier("missing", store, clock=clock)
        received = []
        classifier.subscribe(received.append)

        record = classifier.classify_failure(Exception("boom"), 7)

        assert received == [record]

    def test_listener_failure_is_isolated(self, classifier, store):
        """测试：一个订阅者异常不影响其它订阅者"""
        received = []

        def broken(record):
            raise RuntimeError("listener crashed")

        classifier.subscribe(broken)
        classifier.subscribe(received.append)

        classifier.classify_success(200, ProbeTiming(total_time=5))

        assert len(received) == 1
        assert store.size("site") == 1

    def test_unsubscribe(self, classifier):
        received = []
        classifier.subscribe(received.append)
        classifier.unsubscribe(received.append)

        classifier.classify_success(200, ProbeTiming(total_time=5))

        assert received == []
