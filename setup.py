from setuptools import setup, find_packages

setup(name='dualio',
      version='0.0.1',
      description='Write an algorithm once as a generator, and run it blocking, with a future, or with a callback',
      classifiers=[
          "Programming Language :: Python :: 3",
          "License :: OSI Approved :: MIT License",
      ],
      keywords='generator coroutine trampoline sync async callback',
      license='MIT',
      packages=find_packages(include=['dualio', 'dualio.*']),
      python_requires='>=3.8',
      install_requires=[
          'trio',
          'outcome',
      ],
)
