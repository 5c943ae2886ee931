import logging

from custom_components.geowatch.channels import Channel


def test_subscribe_and_unsubscribe():
    channel = Channel("coords")
    received = []

    unsubscribe = channel.async_subscribe(received.append)
    channel.emit(1)
    unsubscribe()
    unsubscribe()
    channel.emit(2)

    assert received == [1]
    assert channel.listener_count == 0


def test_subscribe_once():
    channel = Channel("coords")
    received = []

    channel.async_subscribe_once(received.append)
    channel.emit(1)
    channel.emit(2)

    assert received == [1]
    assert channel.listener_count == 0


def test_failing_listener_does_not_stop_delivery(caplog):
    channel = Channel("error")
    received = []

    def broken(payload):
        raise RuntimeError("boom")

    channel.async_subscribe(broken)
    channel.async_subscribe(received.append)

    with caplog.at_level(logging.ERROR):
        channel.emit("timeout")

    assert received == ["timeout"]
    assert "Error in error listener" in caplog.text
