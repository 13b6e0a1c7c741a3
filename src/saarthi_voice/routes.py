"""Route identifiers the engine navigates to or reasons about."""

ROOT = "/"
DASHBOARD = "/dashboard"
SCAN = "/scan"
MEDICINES = "/medicines"
REMINDERS = "/reminders"
VERIFY_MEDICINE = "/verify-medicine"
ALARM = "/alarm"
LANGUAGE = "/language"
REGISTER = "/register"
