"""FTP access to the files of a project's website."""
import ftplib
import io
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

from security.encryption import PasswordCipher
from storage.models import DEFAULT_FTP_PORT, Project

logger = logging.getLogger(__name__)


@dataclass
class FTPConfig:
    """Connection parameters for one FTP site."""
    host: str
    user: str
    encrypted_password: str
    port: int = DEFAULT_FTP_PORT
    path: Optional[str] = None

    @classmethod
    def from_project(cls, project: Project) -> 'FTPConfig':
        return cls(
            host=project.ftp_host,
            user=project.ftp_user,
            encrypted_password=project.ftp_password_encrypted,
            port=project.ftp_port or DEFAULT_FTP_PORT,
            path=project.ftp_path
        )


class FTPManager:
    """Reads and writes text files on a project's FTP server."""

    def __init__(self, cipher: PasswordCipher, timeout: int = 30, verbose: bool = False):
        """
        Initialize the FTP manager.

        Args:
            cipher: Cipher used to decrypt stored FTP passwords
            timeout: Socket timeout in seconds (default: 30)
            verbose: Log the FTP command exchange (default: False)
        """
        self.cipher = cipher
        self.timeout = timeout
        self.verbose = verbose

    @contextmanager
    def connect(self, config: FTPConfig) -> Iterator[ftplib.FTP]:
        """
        Open an authenticated connection, changing into the project path.

        The connection is always closed when the block exits.

        Raises:
            EncryptionError: If the stored password cannot be decrypted
            ftplib.all_errors: On network or protocol failures
        """
        password = self.cipher.decrypt(config.encrypted_password)

        client = ftplib.FTP(timeout=self.timeout, encoding='utf-8')
        client.set_debuglevel(1 if self.verbose else 0)
        try:
            logger.info(f"Connecting to FTP server {config.host}:{config.port}")
            client.connect(config.host, config.port)
            client.login(config.user, password)
            if config.path:
                client.cwd(config.path)
            yield client
        finally:
            client.close()

    def read_file(self, config: FTPConfig, file_path: str) -> str:
        """
        Download a file and decode it as UTF-8.

        Args:
            config: FTP connection parameters
            file_path: Path relative to the configured directory

        Returns:
            File content
        """
        chunks: List[bytes] = []
        with self.connect(config) as client:
            client.retrbinary(f"RETR {file_path}", chunks.append)

        content = b''.join(chunks).decode('utf-8')
        logger.info(f"Read {len(content)} characters from {file_path}")
        return content

    def write_file(self, config: FTPConfig, file_path: str, content: str) -> None:
        """
        Upload text, replacing the remote file.

        Args:
            config: FTP connection parameters
            file_path: Path relative to the configured directory
            content: New file content, encoded as UTF-8
        """
        data = io.BytesIO(content.encode('utf-8'))
        with self.connect(config) as client:
            client.storbinary(f"STOR {file_path}", data)

        logger.info(f"Wrote {len(content)} characters to {file_path}")

    def list_files(self, config: FTPConfig, dir_path: Optional[str] = None) -> List[str]:
        """
        List the regular files of a directory.

        Args:
            config: FTP connection parameters
            dir_path: Directory to list (default: current directory)

        Returns:
            File names, directories excluded
        """
        with self.connect(config) as client:
            entries = client.mlsd(dir_path or '', facts=['type'])
            return [name for name, facts in entries if facts.get('type') == 'file']

    def test_connection(self, config: FTPConfig) -> bool:
        """Return True when a connection and login succeed."""
        try:
            with self.connect(config):
                return True
        except Exception as e:
            logger.error(f"FTP connection test failed: {e}", exc_info=True)
            return False
