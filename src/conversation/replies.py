"""Reply texts sent back over WhatsApp (es-MX)."""

from __future__ import annotations

from typing import Optional

from src.schemas.qualification import QualificationField

BOT_NAME = "VEXIQO"

FIELD_QUESTIONS: dict[QualificationField, str] = {
    QualificationField.NAME: "¿Me compartes tu nombre para apoyarte mejor?",
    QualificationField.HEIGHT: (
        "Para confirmar compatibilidad rápido: ¿qué altura necesitas alcanzar? "
        "(en metros o pies)"
    ),
    QualificationField.LIFT_TYPE: "¿Necesitas brazo articulado o tijera?",
    QualificationField.ACTIVITY: "¿El trabajo es de pintura o uso general?",
    QualificationField.TERRAIN: "¿El terreno es piso firme (concreto) o terracería?",
    QualificationField.CITY: "¿En qué ciudad es el trabajo? (ej: Saltillo, Monterrey)",
    QualificationField.DURATION_DAYS: "¿Cuántos días necesitas el equipo?",
    QualificationField.CONTACT_EMAIL: "¿A qué correo te envío la cotización?",
}

# Clarifying prompts when the last answer could not be understood
RETRY_QUESTIONS: dict[QualificationField, str] = {
    QualificationField.NAME: "No alcancé a leer tu nombre. ¿Cómo te llamas?",
    QualificationField.HEIGHT: (
        "No entendí la altura. ¿Me la indicas con unidad? (ej: 14m o 45ft)"
    ),
    QualificationField.LIFT_TYPE: (
        "Solo para confirmar: ¿brazo articulado o tijera? "
        "Si no estás seguro, dime qué vas a hacer y te recomiendo."
    ),
    QualificationField.ACTIVITY: "¿Es para pintura o para otro trabajo (uso general)?",
    QualificationField.TERRAIN: (
        "¿Dónde se va a mover el equipo: piso firme (concreto) o terracería?"
    ),
    QualificationField.CITY: "¿Me confirmas la ciudad del trabajo?",
    QualificationField.DURATION_DAYS: (
        "¿Cuántos días en total? Con un número basta (ej: 5, 7 o 30)."
    ),
    QualificationField.CONTACT_EMAIL: (
        "Ese correo no parece válido. ¿Me lo compartes de nuevo? (ej: nombre@empresa.com)"
    ),
}


def greeting(company_name: str) -> str:
    return f"Hola 👋 Soy {BOT_NAME} de {company_name}. " + FIELD_QUESTIONS[QualificationField.NAME]


def ask_field(
    next_field: QualificationField,
    *,
    retry: bool = False,
    lead_name: Optional[str] = None,
    name_just_saved: bool = False,
) -> str:
    """Question for the next unmet field, thanking the lead for its name once."""
    table = RETRY_QUESTIONS if retry else FIELD_QUESTIONS
    question = table[next_field]
    if name_just_saved and lead_name:
        return f"Gracias, {lead_name}. {question}"
    return question


def ready_for_quote() -> str:
    return "Perfecto. Ya tengo lo necesario para validar compatibilidad. Dame un momento."


def quote_already_ready(lead_name: Optional[str] = None) -> str:
    who = f", {lead_name}" if lead_name else ""
    return (
        f"Tu cotización ya está lista{who}. "
        "Un asesor te contactará para confirmar disponibilidad y entrega."
    )


def manual_confirmation() -> str:
    return (
        "Gracias. Con esta información un asesor te confirma precio y disponibilidad "
        "en breve."
    )
