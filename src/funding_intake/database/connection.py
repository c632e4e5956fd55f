"""
Engine for the persisted round-robin cursor (PostgreSQL via SQLAlchemy)
"""
from typing import Optional

from sqlalchemy import Engine, create_engine
from rich.markup import escape

from funding_intake.core.config import DatabaseConfig, settings
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)


class DatabasePool:
    """
    Process-wide engine holder.
    Only opened when round_robin.cursor_store is "database".
    """

    _engine: Optional[Engine] = None

    @classmethod
    def initialize(cls, config: Optional[DatabaseConfig] = None) -> None:
        if cls._engine is not None:
            logger.warning("[yellow]Database pool already initialized[/yellow]")
            return

        config = config or settings.database
        if config is None:
            raise RuntimeError("round_robin.cursor_store is 'database' but no database section is configured")

        connect_args = {"options": f"-csearch_path={config.schema}"} if config.schema else {}
        try:
            cls._engine = create_engine(
                config.url,
                pool_pre_ping=True,
                pool_size=config.pool.size,
                max_overflow=config.pool.max_overflow,
                pool_timeout=config.pool.timeout,
                pool_recycle=config.pool.recycle,
                echo=config.pool.echo,
                connect_args=connect_args,
            )
        except Exception as e:
            logger.error(f"[red]❌ Failed to create cursor database engine:[/red] {escape(str(e))}")
            raise

        logger.info(
            f"[green]Cursor database ready[/green] on [cyan]{config.server}:{config.port}/{config.db}[/cyan] "
            f"(pool size={config.pool.size})"
        )

    @classmethod
    def get_engine(cls) -> Engine:
        """Engine, created on first use"""
        if cls._engine is None:
            cls.initialize()
        return cls._engine

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None

    @classmethod
    def close(cls) -> None:
        if cls._engine is None:
            return
        try:
            cls._engine.dispose()
            logger.info("[green]Cursor database pool closed[/green]")
        except Exception as e:
            logger.error(f"[red]Error closing cursor database pool:[/red] {escape(str(e))}")
        finally:
            cls._engine = None

    @classmethod
    def get_pool_status(cls) -> dict:
        if cls._engine is None:
            return {"initialized": False, "checked_out": 0}
        pool = cls._engine.pool
        return {"initialized": True, "checked_out": pool.checkedout()}
