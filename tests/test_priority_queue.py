from fitsocial.priority_queue import PriorityQueue


def test_dequeue_returns_highest_priority_first():
    queue = PriorityQueue()
    for item, priority in (("low", 1), ("high", 10), ("mid", 5)):
        queue.enqueue(item, priority)

    assert queue.size() == 3
    assert [queue.dequeue() for _ in range(3)] == ["high", "mid", "low"]
    assert queue.is_empty()


def test_equal_priorities_keep_insertion_order():
    queue = PriorityQueue()
    queue.enqueue({"id": 1}, 0)
    queue.enqueue({"id": 2}, 0)
    queue.enqueue({"id": 3}, 0)

    assert [queue.dequeue()["id"] for _ in range(3)] == [1, 2, 3]


def test_dequeue_on_empty_queue_returns_none():
    queue = PriorityQueue()
    assert queue.dequeue() is None
    assert len(queue) == 0
