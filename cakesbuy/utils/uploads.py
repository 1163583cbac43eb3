"""Image upload helpers."""

import os
from datetime import datetime
from flask import current_app
from werkzeug.utils import secure_filename


def allowed_file(filename):
    """Check the extension against the configured image types."""
    return '.' in filename and \
        filename.rsplit('.', 1)[1].lower() in current_app.config['ALLOWED_EXTENSIONS']


def save_file(file, folder='images'):
    """Save an uploaded file under UPLOAD_FOLDER and return its public URL."""
    filename = secure_filename(file.filename)
    timestamp = datetime.utcnow().strftime('%Y%m%d%H%M%S%f')
    filename = f'{timestamp}_{filename}'
    upload_path = os.path.join(current_app.config['UPLOAD_FOLDER'], folder)
    os.makedirs(upload_path, exist_ok=True)
    file.save(os.path.join(upload_path, filename))
    return f'/uploads/{folder}/{filename}'
