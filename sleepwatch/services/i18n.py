from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

T = {
    "en": {
        "btn_yes": "✅ Yes",
        "btn_no": "❌ No",
        "btn_skip": "⏭ Skip",
        "btn_cancel": "✖️ Cancel",
        "btn_change_language": "🌐 Change language",

        "start.choose_language": "Choose your language / Выберите язык:",
        "start.lang_chosen": "Language set: English 🇺🇸",
        "start.intro": (
            "😴 <b>Sleepwatch</b> helps you keep an eye on sleeping people.\n\n"
            "Add the people you look after, start a sleep session when they fall asleep "
            "and log a check-up each time you look in on them. "
            "If a check-up is late I will keep reminding you until you do one."
        ),
        "start.reset_title": "⚠️ You already have data here.",
        "start.reset_desc": "Start over? This deletes your people, sleep logs and settings.",
        "start.reset_done": "🧹 All your data has been deleted.",

        "menu.welcome": "🏠 Main menu",
        "menu.hint": "Use the buttons below.",
        "menu.tracker": "😴 Tracker",
        "menu.people": "👥 People",
        "menu.archive": "📚 Archive",
        "menu.settings": "⚙️ Settings",
        "menu.help": "❓ Help",

        "tracker.title": "😴 <b>Sleep tracker</b>",
        "tracker.no_people": "No people yet. Add someone in 👥 People first.",
        "tracker.awake": "☀️ Awake",
        "tracker.sleeping_since": "🌙 Asleep since {time} · check-ups: {count}",
        "tracker.last_checkup": "👀 Last check-up {minutes} min ago",
        "tracker.next_checkup": "⏳ Next check-up in {countdown}",
        "tracker.checkup_due": "🔔 <b>Check-up due now</b>",
        "tracker.btn_start": "🌙 {name} fell asleep",
        "tracker.btn_checkup": "👀 Check {name} ({count})",
        "tracker.btn_checkup_now": "👀 Log check-up",
        "tracker.btn_end": "☀️ Woke up",
        "tracker.btn_refresh": "🔄 Refresh",
        "tracker.started": "Sleep started for {name}",
        "tracker.start_failed": "Could not start: the person is unknown or already asleep.",
        "tracker.checkup_logged": "Check-up logged for {name}",
        "tracker.session_not_found": "This sleep session is no longer active.",
        "tracker.end_prompt": "☀️ {name} woke up. Add notes about this sleep, or skip.",
        "tracker.ended": "✅ Sleep ended for {name}. Check-ups: {count}",
        "tracker.end_cancelled": "The session is still running.",

        "people.title": "👥 <b>People</b>",
        "people.empty": "Nobody here yet.",
        "people.age_short": "{age} y.o.",
        "people.btn_add": "➕ Add person",
        "people.ask_name": "Send the person's name.",
        "people.ask_name_edit": "Editing {name}. Send the new name.",
        "people.invalid_name": "The name must be 1 to {max} characters.",
        "people.ask_age": "Send the age in years, or - to skip.",
        "people.invalid_age": "Please send a whole number between 1 and 129, or - to skip.",
        "people.ask_notes": "Any notes (allergies, habits)? Send them, or - to skip.",
        "people.added": "✅ {name} added.",
        "people.updated": "✅ {name} updated.",
        "people.not_found": "Person not found.",
        "people.remove_confirm": "Remove {name}? Their sleep logs stay in the archive.",
        "people.removed": "Person removed.",
        "people.notifications_on": "Reminders on for {name}",
        "people.notifications_off": "Reminders muted for {name}",

        "settings.title": "⚙️ <b>Settings</b>",
        "settings.on": "on",
        "settings.off": "off",
        "settings.notifications": "🔔 Reminders: {status}",
        "settings.checkup_interval": "⏱ Check-up every {minutes} min",
        "settings.alarm_interval": "🚨 Repeat alarm every {minutes} min",
        "settings.btn_notifications_on": "🔔 Turn reminders on",
        "settings.btn_notifications_off": "🔕 Turn reminders off",
        "settings.btn_checkup_interval": "⏱ Check-up interval",
        "settings.btn_alarm_interval": "🚨 Alarm interval",
        "settings.notifications_enabled": "Reminders enabled",
        "settings.notifications_disabled": "Reminders disabled",
        "settings.ask_checkup_interval": "How many minutes between check-ups?",
        "settings.ask_alarm_interval": "How many minutes between repeated alarms when a check-up is late?",
        "settings.invalid_minutes": "Please send a whole number of minutes from 1 to {max}.",
        "settings.checkup_saved": "✅ Check-up interval set to {minutes} min.",
        "settings.alarm_saved": "✅ Alarm interval set to {minutes} min.",

        "archive.title": "📚 <b>Archive</b>",
        "archive.empty": "No logs for this filter.",
        "archive.invalid_date": "Send the date as YYYY-MM-DD, for example /archive 2024-03-01.",
        "archive.all_people": "Everyone",
        "archive.today": "Today",
        "archive.all_time": "All time",
        "archive.btn_export": "📄 Export .txt",
        "archive.sessions": "Sessions",
        "archive.session_line": "{name}: {start} – {end} ({duration}), check-ups: {count}",
        "archive.entries": "Entries",
        "archive.more": "…and {count} more, export to see all.",
        "archive.notes": "Notes",
        "archive.export_caption": "Sleep log, {count} entries",

        "action.start": "Fell asleep",
        "action.checkup": "Check-up",
        "action.end": "Woke up",

        "notif.due.title": "🔔 Check-up due",
        "notif.due.body": "Time to check on {name}.",
        "notif.overdue.title": "🚨 Check-up overdue",
        "notif.overdue.body": "{name} has not been checked. I will remind you again in {minutes} min.",

        "help.title": "❓ <b>Help</b>",
        "help.body": (
            "1. Add people in 👥 People.\n"
            "2. When someone falls asleep, tap their button in 😴 Tracker.\n"
            "3. Each time you look in on them, tap 👀 to log a check-up.\n"
            "4. When the check-up interval passes I send a reminder, then repeat "
            "an alarm every alarm interval until you log a check-up.\n"
            "5. Tap ☀️ when they wake up. Everything is kept in 📚 Archive; /archive YYYY-MM-DD opens a given day."
        ),
        "help.commands": "/tracker · /people · /archive · /settings · /menu · /start",
    },
    "ru": {
        "btn_yes": "✅ Да",
        "btn_no": "❌ Нет",
        "btn_skip": "⏭ Пропустить",
        "btn_cancel": "✖️ Отмена",
        "btn_change_language": "🌐 Сменить язык",

        "start.choose_language": "Choose your language / Выберите язык:",
        "start.lang_chosen": "Язык установлен: Русский 🇷🇺",
        "start.intro": (
            "😴 <b>Sleepwatch</b> помогает присматривать за спящими.\n\n"
            "Добавьте людей, за которыми ухаживаете, начните сон, когда человек уснул, "
            "и отмечайте каждую проверку. Если проверка запаздывает, я буду напоминать, "
            "пока вы её не сделаете."
        ),
        "start.reset_title": "⚠️ У вас уже есть данные.",
        "start.reset_desc": "Начать заново? Люди, журнал сна и настройки будут удалены.",
        "start.reset_done": "🧹 Все ваши данные удалены.",

        "menu.welcome": "🏠 Главное меню",
        "menu.hint": "Используйте кнопки ниже.",
        "menu.tracker": "😴 Трекер",
        "menu.people": "👥 Люди",
        "menu.archive": "📚 Архив",
        "menu.settings": "⚙️ Настройки",
        "menu.help": "❓ Помощь",

        "tracker.title": "😴 <b>Трекер сна</b>",
        "tracker.no_people": "Пока никого нет. Сначала добавьте человека в 👥 Люди.",
        "tracker.awake": "☀️ Бодрствует",
        "tracker.sleeping_since": "🌙 Спит с {time} · проверок: {count}",
        "tracker.last_checkup": "👀 Последняя проверка {minutes} мин назад",
        "tracker.next_checkup": "⏳ Следующая проверка через {countdown}",
        "tracker.checkup_due": "🔔 <b>Пора проверить</b>",
        "tracker.btn_start": "🌙 {name} уснул(а)",
        "tracker.btn_checkup": "👀 Проверить {name} ({count})",
        "tracker.btn_checkup_now": "👀 Отметить проверку",
        "tracker.btn_end": "☀️ Проснулся",
        "tracker.btn_refresh": "🔄 Обновить",
        "tracker.started": "Сон начат: {name}",
        "tracker.start_failed": "Не удалось начать: человек не найден или уже спит.",
        "tracker.checkup_logged": "Проверка отмечена: {name}",
        "tracker.session_not_found": "Эта сессия сна уже завершена.",
        "tracker.end_prompt": "☀️ {name} проснулся(ась). Добавьте заметки о сне или пропустите.",
        "tracker.ended": "✅ Сон завершён: {name}. Проверок: {count}",
        "tracker.end_cancelled": "Сессия продолжается.",

        "people.title": "👥 <b>Люди</b>",
        "people.empty": "Здесь пока никого нет.",
        "people.age_short": "{age} лет",
        "people.btn_add": "➕ Добавить",
        "people.ask_name": "Отправьте имя.",
        "people.ask_name_edit": "Редактирование: {name}. Отправьте новое имя.",
        "people.invalid_name": "Имя должно быть от 1 до {max} символов.",
        "people.ask_age": "Отправьте возраст в годах или - чтобы пропустить.",
        "people.invalid_age": "Отправьте целое число от 1 до 129 или - чтобы пропустить.",
        "people.ask_notes": "Заметки (аллергии, привычки)? Отправьте их или - чтобы пропустить.",
        "people.added": "✅ {name} добавлен(а).",
        "people.updated": "✅ {name} обновлён(а).",
        "people.not_found": "Человек не найден.",
        "people.remove_confirm": "Удалить {name}? Журнал сна останется в архиве.",
        "people.removed": "Удалено.",
        "people.notifications_on": "Напоминания включены: {name}",
        "people.notifications_off": "Напоминания выключены: {name}",

        "settings.title": "⚙️ <b>Настройки</b>",
        "settings.on": "вкл",
        "settings.off": "выкл",
        "settings.notifications": "🔔 Напоминания: {status}",
        "settings.checkup_interval": "⏱ Проверка каждые {minutes} мин",
        "settings.alarm_interval": "🚨 Повтор тревоги каждые {minutes} мин",
        "settings.btn_notifications_on": "🔔 Включить напоминания",
        "settings.btn_notifications_off": "🔕 Выключить напоминания",
        "settings.btn_checkup_interval": "⏱ Интервал проверок",
        "settings.btn_alarm_interval": "🚨 Интервал тревоги",
        "settings.notifications_enabled": "Напоминания включены",
        "settings.notifications_disabled": "Напоминания выключены",
        "settings.ask_checkup_interval": "Сколько минут между проверками?",
        "settings.ask_alarm_interval": "Через сколько минут повторять тревогу, если проверка опаздывает?",
        "settings.invalid_minutes": "Отправьте целое число минут от 1 до {max}.",
        "settings.checkup_saved": "✅ Интервал проверок: {minutes} мин.",
        "settings.alarm_saved": "✅ Интервал тревоги: {minutes} мин.",

        "archive.title": "📚 <b>Архив</b>",
        "archive.empty": "Нет записей по этому фильтру.",
        "archive.invalid_date": "Укажите дату в формате ГГГГ-ММ-ДД, например /archive 2024-03-01.",
        "archive.all_people": "Все",
        "archive.today": "Сегодня",
        "archive.all_time": "За всё время",
        "archive.btn_export": "📄 Экспорт .txt",
        "archive.sessions": "Сессии",
        "archive.session_line": "{name}: {start} – {end} ({duration}), проверок: {count}",
        "archive.entries": "Записи",
        "archive.more": "…и ещё {count}, экспортируйте, чтобы увидеть всё.",
        "archive.notes": "Заметки",
        "archive.export_caption": "Журнал сна, записей: {count}",

        "action.start": "Уснул(а)",
        "action.checkup": "Проверка",
        "action.end": "Проснулся(ась)",

        "notif.due.title": "🔔 Пора проверить",
        "notif.due.body": "Пора проверить: {name}.",
        "notif.overdue.title": "🚨 Проверка просрочена",
        "notif.overdue.body": "{name} не проверен(а). Напомню снова через {minutes} мин.",

        "help.title": "❓ <b>Помощь</b>",
        "help.body": (
            "1. Добавьте людей в 👥 Люди.\n"
            "2. Когда человек уснул, нажмите его кнопку в 😴 Трекер.\n"
            "3. Каждый раз, когда заглядываете к нему, нажимайте 👀.\n"
            "4. Когда проходит интервал проверки, я пришлю напоминание, а затем "
            "буду повторять тревогу, пока вы не отметите проверку.\n"
            "5. Нажмите ☀️, когда человек проснётся. Всё сохраняется в 📚 Архив; /archive ГГГГ-ММ-ДД открывает нужный день."
        ),
        "help.commands": "/tracker · /people · /archive · /settings · /menu · /start",
    },
}


def t(lang: str, key: str, **kwargs) -> str:
    """Look up ``key`` for ``lang``, falling back to English and then the key."""
    text = T.get(lang, {}).get(key) or T["en"].get(key)
    if text is None:
        logger.warning("Missing translation for %s", key)
        return key
    return text.format(**kwargs) if kwargs else text
