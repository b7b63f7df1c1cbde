from enum import Enum
from typing import Dict, List

from walletbot.services.reports.formatter import ReportFormatter
from .base_flow import BaseFlow, FlowOutcome, Step
from .validators import FlowValidators


class LoginStep(str, Enum):
    EMAIL = "awaiting_login_email"
    PASSWORD = "awaiting_login_password"


class SignupStep(str, Enum):
    NAME = "awaiting_signup_name"
    SURNAME = "awaiting_signup_surname"
    EMAIL = "awaiting_signup_email"
    PASSWORD = "awaiting_signup_password"


class LoginFlow(BaseFlow):
    """Email and password sign in. A successful commit establishes the session."""

    name = "login"
    steps_enum = LoginStep
    progress_message = "⏳ Signing in..."

    def build_steps(self) -> List[Step]:
        return [
            Step(LoginStep.EMAIL, "email", FlowValidators.validate_email,
                 "📧 Please enter your *email address*:", next_step=LoginStep.PASSWORD),
            Step(LoginStep.PASSWORD, "password", FlowValidators.validate_login_password,
                 "🔑 Please enter your *password*:", sensitive=True),
        ]

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        result = await self.api.sign_in(data["email"], data["password"])
        if not result.ok:
            return FlowOutcome(False, f"❌ Login failed: {result.error_message}\n\nUse /login to try again.")

        session = self.sessions.set(conversation_id, result.value)
        self.logger.info(f"[LOGIN] Session established for {conversation_id}")
        return FlowOutcome(True, ReportFormatter.logged_in(session.display_name))


class SignupFlow(BaseFlow):
    """Account creation. The new account is signed in right away."""

    name = "signup"
    steps_enum = SignupStep
    progress_message = "⏳ Creating your account..."

    def build_steps(self) -> List[Step]:
        return [
            Step(SignupStep.NAME, "name", FlowValidators.validate_text,
                 "👤 Please enter your *first name*:", next_step=SignupStep.SURNAME),
            Step(SignupStep.SURNAME, "surname", FlowValidators.validate_text,
                 "👤 Please enter your *surname*:", next_step=SignupStep.EMAIL),
            Step(SignupStep.EMAIL, "email", FlowValidators.validate_email,
                 "📧 Please enter your *email address*:", next_step=SignupStep.PASSWORD),
            Step(SignupStep.PASSWORD, "password", FlowValidators.validate_new_password,
                 "🔑 Please create a *password* (at least 6 characters):", sensitive=True),
        ]

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        result = await self.api.sign_up(data["email"], data["password"], data["name"], data["surname"])
        if not result.ok:
            return FlowOutcome(False, f"❌ Signup failed: {result.error_message}\n\nUse /signup to try again.")

        session = self.sessions.set(conversation_id, result.value)
        return FlowOutcome(True, ReportFormatter.signed_up(session.display_name))
