from pleco.cli import main

raise SystemExit(main())
