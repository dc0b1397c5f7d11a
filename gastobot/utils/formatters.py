from telegram.helpers import escape_markdown

from gastobot.models.expense import ExpenseRecord

CURRENCY = "R$"


def md(text: str) -> str:
    """Экранирует пользовательский текст для legacy Markdown."""
    return escape_markdown(text, version=1)


def format_value(value: float) -> str:
    """Форматирует сумму для отображения."""
    return f"{CURRENCY} {value:.2f}"


def format_expense_summary(record: ExpenseRecord) -> str:
    return (
        "Perfeito! Registrando o gasto:\n"
        f"Descrição: *{md(record.description)}*\n"
        f"Categoria: *{md(record.category)}*\n"
        f"Valor: *{format_value(record.value)}*"
    )


def format_uptime(seconds: int) -> str:
    hours, rest = divmod(seconds, 3600)
    minutes = rest // 60
    if hours:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"


def format_status(summary: dict, open_drafts: int) -> str:
    status_emoji = {
        "healthy": "✅",
        "degraded": "⚠️",
        "unhealthy": "❌",
    }
    emoji = status_emoji.get(summary["status"], "❓")
    messages = summary["messages"]
    submissions = summary["submissions"]

    lines = [
        f"{emoji} STATUS: {summary['status'].upper()}",
        "",
        f"⏱ Em execução: {format_uptime(summary['uptime_seconds'])}",
        f"💾 Memória: {summary['memory_mb']} MB",
        f"📝 Gastos em andamento: {open_drafts}",
        "",
        f"📊 Mensagens: {messages['total']} (erros: {messages['errors']})",
        f"🔌 API de gastos: {submissions['total']} envios,"
        f" {submissions['success_rate']}% com sucesso",
        f"• enviados: {submissions['ok']}, recusados: {submissions['rejected']},"
        f" sem conexão: {submissions['unreachable']}",
    ]

    if summary["send_failures"]:
        lines.append(f"📭 Falhas de envio no Telegram: {summary['send_failures']}")

    if submissions["last_error"]:
        lines.append(f"Último erro: {submissions['last_error']}")

    return "\n".join(lines)
