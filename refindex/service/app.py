"""FastAPI application exposing read-only index queries."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import UnknownEntity
from ..index import Index
from ..logging import get_logger
from ..models import Entity
from ..query import QueryEngine
from ..resolver import resolve


class LocationModel(BaseModel):
    document: str
    section: str


class RelationshipModel(BaseModel):
    relation: str
    target: str


class EntityResponse(BaseModel):
    name: str
    category: str
    locations: List[LocationModel]
    relationships: List[RelationshipModel]


class EntitySummary(BaseModel):
    name: str
    category: str


class RelationshipsResponse(BaseModel):
    entity: str
    relation: str
    targets: List[str]


class DanglingModel(BaseModel):
    document: str
    section: str
    block_index: int
    target: str
    target_section: Optional[str] = None
    reason: str
    label: str = ""


class ResolutionResponse(BaseModel):
    resolved: int
    dangling: List[DanglingModel]


class HealthResponse(BaseModel):
    status: str
    documents: int
    entities: int


def _entity_response(entity: Entity) -> EntityResponse:
    return EntityResponse(
        name=entity.name,
        category=entity.category,
        locations=[LocationModel(document=ref.document, section=ref.section) for ref in entity.locations],
        relationships=[
            RelationshipModel(relation=edge.relation, target=edge.target)
            for edge in entity.relationships
        ],
    )


def create_app(index_factory: Callable[[], Index]) -> FastAPI:
    """Create the FastAPI application serving queries over one index snapshot."""

    app = FastAPI(title="refindex Service", version="1.0.0")
    logger = get_logger("service")
    app.state.index = index_factory()

    async def get_engine(request: Request) -> QueryEngine:
        # Reads whichever snapshot is current; reloads swap it wholesale.
        return QueryEngine(request.app.state.index)

    @app.get("/health", response_model=HealthResponse)
    async def health(engine: QueryEngine = Depends(get_engine)) -> HealthResponse:
        return HealthResponse(
            status="ok",
            documents=len(engine.index.documents),
            entities=len(engine.index.entities),
        )

    @app.get("/entities", response_model=List[EntitySummary])
    async def list_entities(
        category: Optional[str] = None,
        engine: QueryEngine = Depends(get_engine),
    ) -> List[EntitySummary]:
        return [
            EntitySummary(name=entity.name, category=entity.category)
            for entity in engine.entities(category)
        ]

    @app.get("/entities/{name}", response_model=EntityResponse)
    async def get_entity(name: str, engine: QueryEngine = Depends(get_engine)) -> Any:
        entity = engine.lookup_entity(name)
        if not entity:
            return JSONResponse(status_code=404, content={"detail": f"Entity not found: {name}"})
        return _entity_response(entity)

    @app.get("/entities/{name}/sections", response_model=List[LocationModel])
    async def get_sections(name: str, engine: QueryEngine = Depends(get_engine)) -> List[LocationModel]:
        return [
            LocationModel(document=ref.document, section=ref.section)
            for ref in engine.sections_mentioning(name)
        ]

    @app.get("/entities/{name}/relationships/{relation}", response_model=RelationshipsResponse)
    async def get_relationships(
        name: str,
        relation: str,
        engine: QueryEngine = Depends(get_engine),
    ) -> RelationshipsResponse:
        targets = engine.relationships_of(name, relation)
        return RelationshipsResponse(entity=name, relation=relation, targets=list(targets))

    @app.get("/references/dangling", response_model=ResolutionResponse)
    async def get_dangling(engine: QueryEngine = Depends(get_engine)) -> ResolutionResponse:
        report = resolve(engine.index)
        return ResolutionResponse(
            resolved=report.resolved,
            dangling=[
                DanglingModel(
                    document=item.source.document,
                    section=item.source.section,
                    block_index=item.block_index,
                    target=item.target,
                    target_section=item.target_section,
                    reason=item.reason,
                    label=item.label,
                )
                for item in report.dangling
            ],
        )

    @app.post("/reload", response_model=HealthResponse)
    async def reload_index(request: Request) -> HealthResponse:
        loop = asyncio.get_running_loop()
        index = await loop.run_in_executor(None, index_factory)
        request.app.state.index = index
        logger.info("Reloaded index: %d documents", len(index.documents))
        return HealthResponse(
            status="ok", documents=len(index.documents), entities=len(index.entities)
        )

    @app.exception_handler(UnknownEntity)
    async def unknown_entity_handler(_: Any, exc: UnknownEntity) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


def run_service(
    path: str = ".", host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    from ..cli import load_index

    def _factory() -> Index:
        _, index = load_index(path)
        return index

    uvicorn.run(create_app(_factory), host=host, port=port)
