from dataclasses import dataclass

from libb import ConfigOptions, scriptname

__all__ = [
    'DatabaseOptions',
]


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    MySQL connection options. ``appname`` is reported to the server as the
    ``program_name`` connection attribute.

    Connection pooling options:
    - use_pool: Whether to use connection pooling (default: False)
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Maximum seconds a connection can be idle (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)
    """
    drivername: str = 'mysql'
    hostname: str = 'localhost'
    username: str = None
    password: str = None
    database: str = None
    port: int = 3306
    timeout: int = 0
    charset: str = 'utf8mb4'
    appname: str = None
    check_connection: bool = True
    # Connection pooling parameters
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        if self.drivername != 'mysql':
            raise ValueError(f'drivername must be mysql, got {self.drivername!r}')
        if not self.database:
            raise ValueError('database is required')
        if not self.username:
            raise ValueError('username is required')
        if not 0 < int(self.port) < 65536:
            raise ValueError(f'port out of range: {self.port}')
        self.appname = self.appname or scriptname() or 'python_console'
