from unittest import mock

from django.core.cache import caches

from food.cache import ListingCache, detail_cache_key, list_cache_key


def test_list_key_is_independent_of_param_order():
    a = list_cache_key({"status": "partial", "page": "2", "sort": "title"})
    b = list_cache_key({"sort": "title", "page": "2", "status": "partial"})
    assert a == b
    assert a == 'food:list:{"page":"2","sort":"title","status":"partial"}'


def test_list_key_for_empty_query():
    assert list_cache_key({}) == "food:list:{}"


def test_list_key_keeps_unicode():
    assert list_cache_key({"location": "Pune café"}) == 'food:list:{"location":"Pune café"}'


def test_detail_key():
    assert detail_cache_key(42) == "food:detail:42"


def test_failing_backend_degrades_to_miss():
    backend = mock.Mock()
    backend.get.side_effect = ConnectionError("redis down")
    backend.set.side_effect = ConnectionError("redis down")
    backend.delete_pattern.side_effect = ConnectionError("redis down")
    backend.keys.side_effect = ConnectionError("redis down")
    cache = ListingCache(backend)

    assert cache.get_list({"page": "1"}) is None
    assert cache.set_detail(1, {"id": 1}) is False
    cache.invalidate_listing(1)
    assert cache.flush() == 0
    assert cache.stats() == {"food_list_cache_count": 0, "food_detail_cache_count": 0}


def test_set_uses_configured_ttls():
    backend = mock.Mock()
    cache = ListingCache(backend, list_ttl=30, detail_ttl=90)
    cache.set_list({"page": "1"}, {"data": []})
    cache.set_detail(7, {"id": 7})
    backend.set.assert_any_call('food:list:{"page":"1"}', {"data": []}, 30)
    backend.set.assert_any_call("food:detail:7", {"id": 7}, 90)


def test_invalidate_drops_all_lists_and_one_detail():
    cache = ListingCache(caches["default"])
    cache.set_list({}, {"data": []})
    cache.set_list({"status": "partial"}, {"data": []})
    cache.set_detail(1, {"id": 1})
    cache.set_detail(2, {"id": 2})

    cache.invalidate_listing(1)

    assert cache.get_list({}) is None
    assert cache.get_list({"status": "partial"}) is None
    assert cache.get_detail(1) is None
    assert cache.get_detail(2) == {"id": 2}


def test_invalidate_without_id_keeps_details():
    cache = ListingCache(caches["default"])
    cache.set_list({}, {"data": []})
    cache.set_detail(3, {"id": 3})

    cache.invalidate_listing()

    assert cache.get_list({}) is None
    assert cache.get_detail(3) == {"id": 3}


def test_stats_counts_and_flush():
    cache = ListingCache(caches["default"])
    cache.set_list({}, {"data": []})
    cache.set_detail(1, {"id": 1})
    cache.set_detail(2, {"id": 2})

    stats = cache.stats()
    assert stats["food_list_cache_count"] == 1
    assert stats["food_detail_cache_count"] == 2

    assert cache.flush("food:detail:*") == 2
    assert cache.get_list({}) == {"data": []}
