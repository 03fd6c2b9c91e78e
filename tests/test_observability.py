from unittest.mock import MagicMock

import pytest
from starlette.responses import PlainTextResponse
from starlette.routing import Match, Route

from src.utils.observablity import PrometheusMiddleware


def endpoint(request):
    return PlainTextResponse('ok')


def make_request(routes, path):
    request = MagicMock()
    request.app.routes = routes
    request.scope = {'type': 'http', 'method': 'GET', 'path': path, 'root_path': ''}
    request.url.path = path
    return request


def included_router(match: Match):
    """A mounted router: matches requests but has no path template"""
    route = MagicMock(spec=['matches'])
    route.matches.return_value = (match, {})
    return route


@pytest.mark.unit
class TestMetricsPath:
    def test_route_template_is_used(self):
        request = make_request([Route('/cart/{cart_id}', endpoint)], '/cart/abc')

        assert PrometheusMiddleware.get_path(request) == ('/cart/{cart_id}', True)

    def test_included_router_without_path_falls_back_to_url(self):
        request = make_request([included_router(Match.FULL)], '/cart/abc')

        assert PrometheusMiddleware.get_path(request) == ('/cart/abc', True)

    def test_template_wins_over_included_router(self):
        request = make_request(
            [included_router(Match.FULL), Route('/cart/{cart_id}', endpoint)], '/cart/abc'
        )

        assert PrometheusMiddleware.get_path(request) == ('/cart/{cart_id}', True)

    def test_unmatched_request_is_not_tracked(self):
        request = make_request([included_router(Match.NONE), Route('/cart/{cart_id}', endpoint)], '/nowhere')

        assert PrometheusMiddleware.get_path(request) == ('/nowhere', False)
