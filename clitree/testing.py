# Design (and some implementation) of this owes heavily to Click's
# CliRunner.

"""Utilities for testing command-line applications built with
clitree. :class:`TestClient` runs :meth:`Application.run` with
isolated stdout/stderr and environment, and captures the exit code
passed to the application's terminate function.
"""

import io
import os
import sys
import shlex
import contextlib


class Result(object):
    """Holds the captured result of an invoked CLI application."""

    def __init__(self, test_client, stdout_bytes, stderr_bytes, exit_code,
                 exc_info, command=None):
        self.test_client = test_client
        self.stdout_bytes = stdout_bytes
        self.stderr_bytes = stderr_bytes
        self.exit_code = exit_code  # integer
        self.command = command  # selected command path, on success

        # if an exception occurred:
        self.exc_info = exc_info

    @property
    def exception(self):
        return self.exc_info[1] if self.exc_info else None

    @property
    def stdout(self):
        """The standard output as unicode string."""
        return self.stdout_bytes.decode(self.test_client.encoding, 'replace') \
            .replace('\r\n', '\n')

    @property
    def stderr(self):
        """The standard error as unicode string."""
        if self.stderr_bytes is None:
            raise ValueError("stderr not separately captured")
        return self.stderr_bytes.decode(self.test_client.encoding, 'replace') \
            .replace('\r\n', '\n')

    def __repr__(self):
        return '<%s %s>' % (
            self.__class__.__name__,
            repr(self.exception) if self.exception else ('exit_code=%s' % self.exit_code),
        )


class TestClient(object):
    """Invokes an Application's ``run()`` method, as a shell would.

    Args:
       app (Application): The application under test. Its terminate
          function should raise SystemExit (the default,
          ``sys.exit``, does).
       env (dict): Environment variables set for every invocation. A
          value of None unsets the variable.
       mix_stderr (bool): Capture stderr into stdout.
       reraise (bool): Reraise exceptions other than SystemExit.
    """
    __test__ = False  # not a pytest test class

    def __init__(self, app, env=None, mix_stderr=False, reraise=True):
        self.app = app
        self.base_env = env or {}
        self.reraise = reraise
        self.mix_stderr = mix_stderr
        self.encoding = 'utf8'

    @contextlib.contextmanager
    def isolate(self, env=None):
        old_stdout, old_stderr = sys.stdout, sys.stderr

        full_env = dict(self.base_env)
        if env:
            full_env.update(env)

        bytes_output = io.BytesIO()
        bytes_error = None
        sys.stdout = io.TextIOWrapper(bytes_output, encoding=self.encoding)
        if self.mix_stderr:
            sys.stderr = sys.stdout
        else:
            bytes_error = io.BytesIO()
            sys.stderr = io.TextIOWrapper(bytes_error, encoding=self.encoding)

        old_env = {}
        try:
            _sync_env(os.environ, full_env, old_env)

            yield (bytes_output, bytes_error)
        finally:
            _sync_env(os.environ, old_env)

            sys.stdout.flush()
            sys.stderr.flush()
            sys.stdout = old_stdout
            sys.stderr = old_stderr

        return

    def invoke(self, args, env=None):
        """Run the application with *args*, a list of strings or a single
        shell-style string, not including the program name.
        """
        with self.isolate(env=env) as (stdout, stderr):
            exc_info = None
            exit_code = 0
            command = None

            if isinstance(args, str):
                args = shlex.split(args)

            try:
                command = self.app.run(list(args or ()))
            except SystemExit as se:
                exc_info = sys.exc_info()
                exit_code = se.code
                if exit_code is None:
                    exit_code = 0

                if not isinstance(exit_code, int):
                    sys.stdout.write(str(exit_code))
                    sys.stdout.write('\n')
                    exit_code = 1
            except Exception:
                if self.reraise:
                    raise
                exit_code = 1
                exc_info = sys.exc_info()
            finally:
                sys.stdout.flush()
                sys.stderr.flush()
                stdout_bytes = stdout.getvalue()
                stderr_bytes = stderr.getvalue() if stderr is not None else None

        return Result(test_client=self,
                      stdout_bytes=stdout_bytes,
                      stderr_bytes=stderr_bytes,
                      exit_code=exit_code,
                      exc_info=exc_info,
                      command=command)


def _sync_env(env, new, backup=None):
    for key, value in new.items():
        if backup is not None:
            backup[key] = env.get(key)
        if value is not None:
            env[key] = value
            continue
        env.pop(key, None)
    return backup
