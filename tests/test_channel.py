"""Tests for the single-slot state channel"""

import threading

from catbreeds.state.channel import StateChannel


class TestStateChannel:
    """Test publish, subscribe and wait"""

    def test_initial_value(self):
        channel = StateChannel("idle")

        assert channel.value == "idle"
        assert channel.version == 0

    def test_publish_replaces_value(self):
        channel = StateChannel(0)

        channel.publish(1)
        channel.publish(2)

        assert channel.value == 2
        assert channel.version == 2

    def test_update_applies_function(self):
        channel = StateChannel(5)

        assert channel.update(lambda v: v + 1) == 6
        assert channel.value == 6

    def test_subscribe_replays_current_value(self):
        channel = StateChannel("a")
        seen = []

        channel.subscribe(seen.append)
        channel.publish("b")

        assert seen == ["a", "b"]

    def test_subscribe_without_replay(self):
        channel = StateChannel("a")
        seen = []

        channel.subscribe(seen.append, replay=False)
        channel.publish("b")

        assert seen == ["b"]

    def test_unsubscribe(self):
        channel = StateChannel("a")
        seen = []

        unsubscribe = channel.subscribe(seen.append, replay=False)
        unsubscribe()
        unsubscribe()
        channel.publish("b")

        assert seen == []

    def test_failing_subscriber_does_not_block_others(self):
        channel = StateChannel(0)
        seen = []

        def broken(value):
            raise RuntimeError("render failed")

        channel.subscribe(broken, replay=False)
        channel.subscribe(seen.append, replay=False)
        channel.publish(1)

        assert seen == [1]
        assert channel.value == 1

    def test_subscriber_may_publish(self):
        channel = StateChannel(0)

        def bump_once(value):
            if value == 1:
                channel.publish(2)

        channel.subscribe(bump_once, replay=False)
        channel.publish(1)

        assert channel.value == 2

    def test_wait_for_update(self):
        channel = StateChannel("old")
        publisher = threading.Timer(0.05, channel.publish, args=("new",))
        publisher.start()

        version, value = channel.wait_for_update(0, timeout=5)

        publisher.join()
        assert (version, value) == (1, "new")

    def test_wait_for_update_timeout(self):
        channel = StateChannel("old")

        assert channel.wait_for_update(0, timeout=0.01) == (0, "old")
