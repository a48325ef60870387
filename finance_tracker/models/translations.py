"""
Interface Translations

One table of UI labels per supported language. English is complete and
is the fallback: a language without an entry for a key shows the English
text, and a key unknown even to English shows the key itself.
"""

from typing import Callable

from finance_tracker.models.expense import DEFAULT_LANGUAGE, Language


TRANSLATIONS: dict[Language, dict[str, str]] = {
    Language.EN: {
        "app_title": "Finance Tracker",
        "sign_in_prompt": "Sign in to see your expenses and budgets.",
        "name": "Name",
        "email": "Email",
        "sign_in": "Sign in",
        "signed_in_as": "Signed in as",
        "log_out": "Log out",
        "recovered_data": "Recovered stored data",
        "save_failed": "Could not save your change",
        "tab_dashboard": "Dashboard",
        "tab_history": "History",
        "tab_budgets": "Budgets",
        "tab_report": "Report",
        "tab_settings": "Settings",
        "welcome_back": "Welcome back",
        "total_spent": "Total spent",
        "expenses": "Expenses",
        "top_category": "Top category",
        "add_expense": "Add expense",
        "amount": "Amount",
        "category": "Category",
        "description": "Description",
        "date": "Date",
        "add": "Add",
        "added": "Added",
        "monthly_goals": "Monthly goals",
        "of": "of",
        "insights": "Insights",
        "refresh_insights": "Refresh insights",
        "thinking": "Thinking about your spending...",
        "insight_unavailable": "Insight unavailable, try again",
        "insight_not_configured": "Insights are not configured",
        "add_expense_for_insights": "Add an expense to get insights.",
        "press_refresh": "Press refresh to analyze your spending.",
        "expense_history": "Expense history",
        "no_expenses": "No expenses yet. Add your first one on the dashboard.",
        "limit": "Limit",
        "save": "Save",
        "spent": "Spent",
        "limit_updated": "Limit updated",
        "reset_defaults": "Reset to defaults",
        "monthly_report": "Monthly report",
        "nothing_recorded": "No expenses recorded yet.",
        "month": "Month",
        "spent_this_month": "Spent this month",
        "over_budget": "Over budget",
        "currency": "Currency",
        "language": "Language",
        "save_settings": "Save settings",
        "settings_saved": "Settings saved",
        "connection_status": "Connection status",
        "configured": "Configured",
        "not_configured": "Not configured",
        "recent_activity": "Recent activity",
    },
    Language.HI: {
        "app_title": "वित्त ट्रैकर",
        "sign_in_prompt": "अपने खर्च और बजट देखने के लिए साइन इन करें।",
        "name": "नाम",
        "email": "ईमेल",
        "sign_in": "साइन इन",
        "signed_in_as": "साइन इन",
        "log_out": "लॉग आउट",
        "tab_dashboard": "डैशबोर्ड",
        "tab_history": "इतिहास",
        "tab_budgets": "बजट",
        "tab_report": "रिपोर्ट",
        "tab_settings": "सेटिंग्स",
        "welcome_back": "वापसी पर स्वागत है",
        "total_spent": "कुल खर्च",
        "expenses": "खर्च",
        "top_category": "सबसे बड़ी श्रेणी",
        "add_expense": "खर्च जोड़ें",
        "amount": "राशि",
        "category": "श्रेणी",
        "description": "विवरण",
        "date": "तारीख",
        "add": "जोड़ें",
        "monthly_goals": "मासिक लक्ष्य",
        "insights": "सुझाव",
        "refresh_insights": "सुझाव ताज़ा करें",
        "insight_unavailable": "सुझाव उपलब्ध नहीं, फिर से प्रयास करें",
        "expense_history": "खर्च का इतिहास",
        "limit": "सीमा",
        "save": "सहेजें",
        "monthly_report": "मासिक रिपोर्ट",
        "month": "महीना",
        "over_budget": "बजट से अधिक",
        "currency": "मुद्रा",
        "language": "भाषा",
        "save_settings": "सेटिंग्स सहेजें",
    },
    Language.BN: {
        "app_title": "ফিনান্স ট্র্যাকার",
        "sign_in_prompt": "আপনার খরচ ও বাজেট দেখতে সাইন ইন করুন।",
        "name": "নাম",
        "email": "ইমেইল",
        "sign_in": "সাইন ইন",
        "log_out": "লগ আউট",
        "tab_dashboard": "ড্যাশবোর্ড",
        "tab_history": "ইতিহাস",
        "tab_budgets": "বাজেট",
        "tab_report": "রিপোর্ট",
        "tab_settings": "সেটিংস",
        "welcome_back": "আবার স্বাগতম",
        "total_spent": "মোট খরচ",
        "expenses": "খরচ",
        "add_expense": "খরচ যোগ করুন",
        "amount": "পরিমাণ",
        "category": "বিভাগ",
        "description": "বিবরণ",
        "date": "তারিখ",
        "add": "যোগ করুন",
        "monthly_goals": "মাসিক লক্ষ্য",
        "insights": "পরামর্শ",
        "limit": "সীমা",
        "save": "সংরক্ষণ",
        "monthly_report": "মাসিক রিপোর্ট",
        "month": "মাস",
        "currency": "মুদ্রা",
        "language": "ভাষা",
    },
    Language.ES: {
        "app_title": "Control de Gastos",
        "sign_in_prompt": "Inicia sesión para ver tus gastos y presupuestos.",
        "name": "Nombre",
        "email": "Correo",
        "sign_in": "Iniciar sesión",
        "signed_in_as": "Sesión iniciada como",
        "log_out": "Cerrar sesión",
        "save_failed": "No se pudo guardar el cambio",
        "tab_dashboard": "Panel",
        "tab_history": "Historial",
        "tab_budgets": "Presupuestos",
        "tab_report": "Informe",
        "tab_settings": "Ajustes",
        "welcome_back": "Bienvenido de nuevo",
        "total_spent": "Total gastado",
        "expenses": "Gastos",
        "top_category": "Categoría principal",
        "add_expense": "Añadir gasto",
        "amount": "Importe",
        "category": "Categoría",
        "description": "Descripción",
        "date": "Fecha",
        "add": "Añadir",
        "added": "Añadido",
        "monthly_goals": "Metas mensuales",
        "of": "de",
        "insights": "Consejos",
        "refresh_insights": "Actualizar consejos",
        "insight_unavailable": "Consejo no disponible, inténtalo de nuevo",
        "expense_history": "Historial de gastos",
        "no_expenses": "Aún no hay gastos. Añade el primero en el panel.",
        "limit": "Límite",
        "save": "Guardar",
        "spent": "Gastado",
        "reset_defaults": "Restablecer valores",
        "monthly_report": "Informe mensual",
        "month": "Mes",
        "spent_this_month": "Gastado este mes",
        "over_budget": "Sobre el presupuesto",
        "currency": "Moneda",
        "language": "Idioma",
        "save_settings": "Guardar ajustes",
        "settings_saved": "Ajustes guardados",
        "recent_activity": "Actividad reciente",
    },
    Language.FR: {
        "app_title": "Suivi des Dépenses",
        "sign_in_prompt": "Connectez-vous pour voir vos dépenses et budgets.",
        "name": "Nom",
        "email": "E-mail",
        "sign_in": "Se connecter",
        "signed_in_as": "Connecté en tant que",
        "log_out": "Se déconnecter",
        "save_failed": "Impossible d'enregistrer la modification",
        "tab_dashboard": "Tableau de bord",
        "tab_history": "Historique",
        "tab_budgets": "Budgets",
        "tab_report": "Rapport",
        "tab_settings": "Paramètres",
        "welcome_back": "Bon retour",
        "total_spent": "Total dépensé",
        "expenses": "Dépenses",
        "top_category": "Catégorie principale",
        "add_expense": "Ajouter une dépense",
        "amount": "Montant",
        "category": "Catégorie",
        "description": "Description",
        "date": "Date",
        "add": "Ajouter",
        "added": "Ajouté",
        "monthly_goals": "Objectifs mensuels",
        "of": "sur",
        "insights": "Conseils",
        "refresh_insights": "Actualiser les conseils",
        "insight_unavailable": "Conseil indisponible, réessayez",
        "expense_history": "Historique des dépenses",
        "no_expenses": "Aucune dépense. Ajoutez la première depuis le tableau de bord.",
        "limit": "Plafond",
        "save": "Enregistrer",
        "spent": "Dépensé",
        "reset_defaults": "Rétablir les valeurs par défaut",
        "monthly_report": "Rapport mensuel",
        "month": "Mois",
        "spent_this_month": "Dépensé ce mois-ci",
        "over_budget": "Budget dépassé",
        "currency": "Devise",
        "language": "Langue",
        "save_settings": "Enregistrer les paramètres",
        "settings_saved": "Paramètres enregistrés",
        "recent_activity": "Activité récente",
    },
}


def translate(language, key: str) -> str:
    """Label for a key in a language, falling back to English, then to the key."""
    try:
        table = TRANSLATIONS.get(Language(language), {})
    except ValueError:
        table = {}
    if key in table:
        return table[key]
    return TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)


def translator(language) -> Callable[[str], str]:
    """A `t(key)` function bound to one language."""
    return lambda key: translate(language, key)
