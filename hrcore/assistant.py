"""Natural-language questions over the current snapshot, answered by an LLM.

The whole snapshot (collaborators and records) is serialised into the prompt.
Any failure, including a missing API key, yields ``APOLOGY_MESSAGE``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI

from hrcore.config import Settings, load_settings
from hrcore.models import Snapshot

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "Lo siento, encontré un error al analizar los datos. Por favor, inténtalo de nuevo."

SYSTEM_INSTRUCTION = """Eres un analista experto en datos de Recursos Humanos. Respondes preguntas usando dos conjuntos de datos JSON.

1. COLABORADORES: todos los empleados. Cada uno tiene un 'id' único y campos como nombre, dni, legajo, cuil, puesto y estado ('Activo' o 'Inactivo').
2. REGISTROS: eventos de RRHH (INGRESO, EGRESO, SANCION, AUSENCIA). Cada registro apunta a un empleado mediante 'collaboratorId', que corresponde al 'id' en COLABORADORES.

Responde ÚNICAMENTE con base en los datos proporcionados y cruza ambas listas cuando haga falta.
Da respuestas claras, concisas y profesionales en español. No inventes información.
Formatea los montos de dinero como moneda (por ejemplo, $1,234.56)."""


def build_contents(question: str, snapshot: Snapshot) -> str:
    data = snapshot.to_dict()
    collaborators = json.dumps(data["collaborators"], indent=2, ensure_ascii=False)
    records = json.dumps(data["records"], indent=2, ensure_ascii=False)
    return (
        "CONTEXTO DE DATOS:\n\n"
        f"### COLABORADORES ###\n{collaborators}\n\n"
        f"### REGISTROS ###\n{records}\n\n"
        f"PREGUNTA DEL USUARIO:\n{question}"
    )


def build_messages(question: str, snapshot: Snapshot) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": build_contents(question, snapshot)},
    ]


def _default_client(settings: Settings) -> OpenAI:
    if not settings.llm_api_key:
        raise RuntimeError("OPENAI_API_KEY is not configured")
    return OpenAI(api_key=settings.llm_api_key, base_url=settings.llm_base_url)


def ask_assistant(
    question: str,
    snapshot: Snapshot,
    client: Optional[Any] = None,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or load_settings()
    try:
        client = client or _default_client(settings)
        response = client.chat.completions.create(
            model=settings.llm_model,
            messages=build_messages(question, snapshot),
            temperature=settings.llm_temperature,
            top_p=settings.llm_top_p,
        )
        answer = response.choices[0].message.content
        if not answer:
            raise ValueError("empty completion")
        return answer.strip()
    except Exception:
        logger.exception("assistant request failed")
        return APOLOGY_MESSAGE
