from __future__ import annotations

from scheduler_agent_core.models import SchedulerCopy


_SCHEDULER_COPY: dict[str, SchedulerCopy] = {
    "en": SchedulerCopy(
        intro_greeting="Hi 👋 I can book your telehealth visit right here. Just a few quick questions.",
        acknowledge_prefill=(
            "I’ll use the name and email from your profile; let me know if anything needs updating."
        ),
        ask_name="To start, what name should the doctor greet you with?",
        ask_email="Great, what email should we send the appointment details to?",
        ask_symptoms="What would you like to speak with the doctor about?",
        ask_time=(
            "When would you prefer to meet? You can share something like "
            "“tomorrow at 5pm” or “2025-10-12 09:30”."
        ),
        ask_time_help="Feel free to include your timezone if you travel often.",
        ask_locale=(
            "Any preferred language or location context the care team should consider? "
            "(optional — you can say “skip”)."
        ),
        optional_skip_hint="You can type “skip” to move ahead.",
        confirm_scheduling="Perfect — give me a few seconds while I schedule that.",
        success_headline="✅ Appointment confirmed — check your email for details.",
        success_details="You are all set. These links will also stay here if you need them again.",
        failure_headline="❌ Hmm... something went wrong.",
        failure_details="Please try again or reach out to our care team if the issue continues.",
        invalid_name="Let’s try that again — please share the name you use with clinicians.",
        invalid_email="I could not read that email. Can you re-enter it like name@example.com?",
        invalid_time=(
            "I could not understand that time. Try something like "
            "“tomorrow at 16:30” or “2025-10-12 09:30”."
        ),
        invalid_symptoms=(
            "Share a short note about what you need from the appointment so the doctor can prepare."
        ),
        view_visit="Join the visit",
        add_calendar="Add to Google Calendar",
        agent_signature="— Medikah Scheduling Assistant",
        skip_words=("skip",),
    ),
    "es": SchedulerCopy(
        intro_greeting="Hola 👋 puedo agendar tu consulta en este chat. Solo necesito unos datos rápidos.",
        acknowledge_prefill="Usaré el nombre y correo de tu perfil; dime si necesitas cambiarlos.",
        ask_name="Para comenzar, ¿con qué nombre debe saludarte el doctor?",
        ask_email="Perfecto, ¿a qué correo enviamos los detalles de la cita?",
        ask_symptoms="¿Qué te gustaría conversar con el doctor en la consulta?",
        ask_time=(
            "¿Cuándo prefieres la consulta? Puedes decir "
            "“mañana a las 17:00” o “2025-10-12 09:30”."
        ),
        ask_time_help="Si viajas seguido, comparte también tu zona horaria.",
        ask_locale=(
            "¿Alguna preferencia de idioma o contexto local que debamos considerar? "
            "(opcional — puedes responder “saltar”)."
        ),
        optional_skip_hint="Escribe “saltar” si quieres continuar sin agregar nada.",
        confirm_scheduling="Perfecto — dame unos segundos para agendar tu cita.",
        success_headline="✅ Cita confirmada — revisa tu correo para ver los detalles.",
        success_details="Todo listo. Estos enlaces quedarán aquí por si los necesitas de nuevo.",
        failure_headline="❌ Ups... hubo un problema.",
        failure_details="Intenta otra vez o contáctanos si el problema continúa.",
        invalid_name="Intentemos de nuevo — comparte el nombre que usas con tus médicos.",
        invalid_email="No pude leer ese correo. ¿Puedes escribirlo de nuevo como nombre@ejemplo.com?",
        invalid_time=(
            "No entendí ese horario. Prueba con “mañana a las 16:30” o “2025-10-12 09:30”."
        ),
        invalid_symptoms=(
            "Comparte una nota breve sobre lo que necesitas para que el doctor pueda prepararse."
        ),
        view_visit="Entrar a la consulta",
        add_calendar="Agregar a Google Calendar",
        agent_signature="— Asistente de Agendamiento Medikah",
        skip_words=("saltar", "omit", "skip"),
    ),
}


def normalize_lang(lang: str | None) -> str:
    candidate = (lang or "").strip().lower()
    if candidate.startswith("es"):
        return "es"
    return "en"


def get_scheduler_copy(lang: str | None = "en") -> SchedulerCopy:
    return _SCHEDULER_COPY.get(normalize_lang(lang), _SCHEDULER_COPY["en"])
