import importlib
import pkgutil

from fastapi import APIRouter, FastAPI
from loguru import logger


def discover_routers(package_name: str = "pokedle.api") -> list[APIRouter]:
    """Collect the module-level ``router`` of every module in ``package_name``.

    Modules are visited in name order so the route table is stable between runs.
    A module that fails to import is fatal: a silently missing router would only
    show up as 404s.
    """
    package = importlib.import_module(package_name)
    routers: list[APIRouter] = []

    for module_info in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        if module_info.ispkg:
            continue

        module = importlib.import_module(f"{package_name}.{module_info.name}")
        router = getattr(module, "router", None)
        if not isinstance(router, APIRouter):
            logger.debug(f"{module.__name__} has no router, skipping")
            continue

        routers.append(router)
        logger.info(f"Discovered {len(router.routes)} routes in {module.__name__}")

    return routers


def register_routers(app: FastAPI, prefix: str = "/api") -> None:
    for router in discover_routers():
        app.include_router(router, prefix=prefix)
