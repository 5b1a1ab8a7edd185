from setuptools import setup

# Read version from ddosradar/VERSION
with open('ddosradar/VERSION') as f:
    VERSION = f.read().strip()

setup(
    name='ddosradar',
    version=VERSION,
    description='Curses dashboard mapping live DDoS attacks from Cloudflare Radar',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console :: Curses',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Networking :: Monitoring',
        'Topic :: Security',
    ],
    packages=['ddosradar'],
    package_data={'ddosradar': ['VERSION', 'countries.json', 'world.json']},
    python_requires='>=3.8',
    install_requires=[
        'requests',
        'pyyaml',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'ddosradar=ddosradar:cli_entry',
        ],
    },
)
