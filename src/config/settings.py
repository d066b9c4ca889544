"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a Supabase project.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.landing.content import SiteContent


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Ripped City Portal API"
    api_version: str = "v1"

    # Supabase Configuration
    supabase_url: str = Field(
        default="",
        description="Supabase project URL. Together with the anon key, gates all auth and data calls."
    )
    supabase_anon_key: str = Field(
        default="",
        description="Supabase anonymous (public) API key."
    )
    supabase_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory backend instead of Supabase. Enables local dev without a project."
    )
    clients_table: str = Field(
        default="clients",
        description="Table holding client records"
    )
    mock_users: str = Field(
        default="",
        description="Comma-separated email:password pairs that can sign in while in mock mode."
    )
    mock_seed_clients: bool = Field(
        default=False,
        description="Load the sample clients into the mock backend at startup."
    )

    # Access control
    coach_email: str = Field(
        default="",
        description="Email of the single coach identity. Compared case-sensitively against the session email."
    )
    demo_access_enabled: bool = Field(
        default=False,
        description="Debug-only entry path (logo gesture / demo email) that bypasses authentication. Never enable in production."
    )
    demo_email: str = Field(
        default="",
        description="Email that triggers the demo entry path from the sign-in form when the backend is unconfigured."
    )
    password_reset_redirect_url: Optional[str] = Field(
        default=None,
        description="Where the password reset email should send the user back to"
    )

    # Landing page
    hero_image_url: str = Field(
        default="https://images.unsplash.com/photo-1534438327276-14e5300c3a48?q=80&w=1200&auto=format&fit=crop",
        description="Hero background image"
    )
    hero_video_url: Optional[str] = Field(
        default=None,
        description="Optional hero background video. Image is used as poster."
    )
    transformation_before_url: str = Field(
        default="https://images.unsplash.com/photo-1583454110551-21f2fa2afe61?q=80&w=800&auto=format&fit=crop",
        description="Transformation 'before' photo"
    )
    transformation_after_url: str = Field(
        default="https://images.unsplash.com/photo-1534438327276-14e5300c3a48?q=80&w=800&auto=format&fit=crop",
        description="Transformation 'after' photo"
    )

    # UI behaviour
    intake_confirmation_seconds: float = Field(
        default=3.0,
        description="How long the intake confirmation panel stays up before the wizard resets and closes."
    )
    logo_tap_threshold: int = Field(
        default=5,
        description="Logo activations needed to trigger the demo entry path"
    )
    logo_tap_window_seconds: float = Field(
        default=3.0,
        description="Idle gap after which the logo activation counter resets"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS / cookies
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )
    cookie_secure: bool = Field(
        default=False,
        description="Mark the portal cookie Secure. Turn on behind HTTPS."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def is_backend_configured(self) -> bool:
        """
        Whether auth and data calls can be made at all.

        Mock mode counts as configured; otherwise both the URL and the
        anon key must be present.
        """
        if self.supabase_mock_mode:
            return True
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def mock_users_list(self) -> list[tuple[str, str]]:
        """Parse email:password pairs for mock mode sign-in."""
        users = []
        for pair in self.mock_users.split(","):
            email, sep, password = pair.strip().partition(":")
            if sep and email and password:
                users.append((email, password))
        return users

    @property
    def site_content(self) -> SiteContent:
        return SiteContent(
            hero_image=self.hero_image_url,
            hero_video=self.hero_video_url,
            transformation_before=self.transformation_before_url,
            transformation_after=self.transformation_after_url,
        )

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        # Supabase only required if not in mock mode
        if not self.supabase_mock_mode:
            if not self.supabase_url:
                missing.append("SUPABASE_URL")
            if not self.supabase_anon_key:
                missing.append("SUPABASE_ANON_KEY")

        # Without a coach identity nobody can reach the dashboard
        if not self.coach_email:
            missing.append("COACH_EMAIL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    This is safe because settings don't change during runtime.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
