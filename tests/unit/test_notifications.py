# =============================================================================
# TESTES - Notification Bus
# =============================================================================

import pytest


class TestNotificationBus:
    """Testes para pub/sub por topico."""

    def test_topic_name(self):
        from quiz.notifications import quiz_topic

        assert quiz_topic("abc") == "quiz-abc"

    def test_publish_without_subscribers(self):
        """Publicar sem assinantes nao falha."""
        from quiz.notifications import NotificationBus

        assert NotificationBus().publish("quiz-x", "quiz-started", {"quizId": "x"}) == 0

    @pytest.mark.asyncio
    async def test_subscriber_receives_event(self):
        from quiz.notifications import NotificationBus

        bus = NotificationBus()

        async with bus.subscribe("quiz-x") as queue:
            delivered = bus.publish("quiz-x", "quiz-submission", {"userId": "u1", "score": 3})
            message = queue.get_nowait()

        assert delivered == 1
        assert message == {"event": "quiz-submission", "data": {"userId": "u1", "score": 3}}

    @pytest.mark.asyncio
    async def test_topics_are_isolated(self):
        from quiz.notifications import NotificationBus

        bus = NotificationBus()

        async with bus.subscribe("quiz-a") as queue:
            bus.publish("quiz-b", "quiz-started", {"quizId": "b"})
            assert queue.empty()

    @pytest.mark.asyncio
    async def test_full_queue_drops_events(self):
        """Assinante lento perde eventos (at-most-once)."""
        from quiz.notifications import NotificationBus

        bus = NotificationBus(queue_maxsize=1)

        async with bus.subscribe("quiz-x") as queue:
            assert bus.publish("quiz-x", "e1", {}) == 1
            assert bus.publish("quiz-x", "e2", {}) == 0
            assert queue.qsize() == 1
            assert queue.get_nowait()["event"] == "e1"

    @pytest.mark.asyncio
    async def test_unsubscribe_on_exit(self):
        from quiz.notifications import NotificationBus

        bus = NotificationBus()

        async with bus.subscribe("quiz-x"):
            assert bus.subscriber_count("quiz-x") == 1

        assert bus.subscriber_count("quiz-x") == 0
        assert bus.publish("quiz-x", "quiz-started", {}) == 0
