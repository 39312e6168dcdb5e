from .errors import ValidationError

MAX_FILES = 5


class Composer:
    """
    Message input bound to a :class:`~chat_client.session.ChatSession`.

    Enter sends, Shift+Enter adds a newline and Escape closes the chat. The
    draft is cleared when a message is submitted and put back if the send
    fails. The input keeps focus after sending.
    """

    def __init__(self, session, max_files=MAX_FILES):
        self.session = session
        self.max_files = max_files
        self.draft = ''
        self.files = []
        self.focused = True

    def type(self, text):
        self.draft += text

    def stage(self, local_file):
        if len(self.files) >= self.max_files:
            raise ValidationError(f"At most {self.max_files} files can be attached.")
        self.files.append(local_file)

    def unstage(self, index):
        del self.files[index]

    def focus(self):
        self.focused = True

    def blur(self):
        self.focused = False

    async def submit(self):
        content, files = self.draft, list(self.files)
        if not content.strip() and not files:
            return None

        self.draft = ''
        self.files = []
        try:
            return await self.session.send(content, files)
        except Exception:
            self.draft = content
            self.files = files
            raise
        finally:
            self.focused = True

    async def handle_key(self, key, shift=False):
        if key == 'Enter':
            if shift:
                self.draft += '\n'
                return None
            return await self.submit()
        if key == 'Escape':
            self.focused = False
            await self.session.close()
        return None
