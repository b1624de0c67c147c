"""
StyleRewards entry point.

    python run.py                              # Flask dev server
    gunicorn -c gunicorn.conf.py run:app       # production
"""
import os
import logging

from stylerewards import create_app

logger = logging.getLogger('stylerewards.run')

app = create_app(os.getenv('FLASK_ENV', 'production'))
logger.info(
    'StyleRewards ready: %d routes, database %s',
    len(list(app.url_map.iter_rules())),
    'configured' if app.config.get('SQLALCHEMY_DATABASE_URI') else 'NOT SET'
)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
