from fastapi import Request

from kzstats.services.registry import ServiceRegistry


def get_services(request: Request) -> ServiceRegistry:
    """Services created by the app lifespan."""
    return request.app.state.services
