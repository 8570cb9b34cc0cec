"""
Persona RPC procedures.

- GET /rpc/personas.list?locale=en|de
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from saaskit.models.rpc import PersonaOut
from saaskit.services.persona_service import PersonaService, get_persona_service

router = APIRouter(prefix="/rpc", tags=["RPC: personas"])


@router.get("/personas.list", response_model=List[PersonaOut])
def list_personas(
    locale: str = Query(default="en", pattern="^(en|de)$"),
    service: PersonaService = Depends(get_persona_service),
):
    """
    Public personas for the chat page's persona picker.

    ``name``, ``description`` and ``prompt`` are localized; ``key`` is the value to
    send as ``persona`` to the chat endpoint.
    """
    personas = []
    for template in service.list_public():
        texts = template.localized(locale)
        personas.append(
            PersonaOut(
                id=template.id,
                key=template.name,
                name=texts["name"],
                description=texts["description"],
                prompt=texts["prompt"],
                category=template.category,
                requires_membership=template.requires_membership,
                tags=template.tags or [],
                variables=template.variables or [],
            )
        )
    return personas
