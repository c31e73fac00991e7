import io

PASSWORD = 'Secret#123'


def upload(filename='document.pdf', content=b'%PDF-1.4 test content'):
    """A file tuple for multipart test requests"""
    return (io.BytesIO(content), filename)
